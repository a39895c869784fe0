"""Stage three: synthesize narration scripts into stored audio."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from ..contracts.content_record import (
    DEFAULT_VOICE,
    ContentRecord,
    Voice,
    format_timestamp,
    parse_timestamp,
    timestamp_after,
)
from ..contracts.results import BatchResult
from ..contracts.status import AUDIO_STAGE
from ..db.audio_storage import AudioStorage
from ..db.event_log import EventLogger
from ..db.record_store import SupabaseRecordStore
from ..tts.elevenlabs_client import ElevenLabsSynthesizer
from .base import StageWorker

CHARACTERS_PER_SECOND = 15


def estimate_duration(script: str) -> int:
    return math.ceil(len(script) / CHARACTERS_PER_SECOND)


@dataclass(frozen=True)
class AudioAsset:
    url: str
    duration_seconds: int


class AudioWorker(StageWorker):
    """Turns ``script_generated`` records into ``ready`` ones with an audio URL."""

    stage = AUDIO_STAGE

    def __init__(
        self,
        store: SupabaseRecordStore,
        events: EventLogger,
        synthesizer: ElevenLabsSynthesizer,
        storage: AudioStorage,
        *,
        batch_size: int = 5,
        max_attempts: int = 3,
        **kwargs: Any,
    ) -> None:
        super().__init__(store, events, batch_size=batch_size, max_attempts=max_attempts, **kwargs)
        self.synthesizer = synthesizer
        self.storage = storage

    def run_batch(self, limit: Optional[int] = None) -> BatchResult:
        try:
            return super().run_batch(limit)
        finally:
            self.synthesizer.close()

    def validate(self, record: ContentRecord) -> List[str]:
        errors: List[str] = []
        if not (record.script or "").strip():
            errors.append(f"Missing or empty script for content block {record.id}")
        if record.voice and Voice.parse(record.voice) is None:
            errors.append(f"Invalid voice: {record.voice}")
        return errors

    def _render(self, record: ContentRecord, voice: Voice) -> AudioAsset:
        script = record.script or ""
        audio = self.synthesizer.synthesize(script, voice)
        url = self.storage.upload(audio, content_type=record.content_type, record_id=record.id, voice=voice.value)
        return AudioAsset(url=url, duration_seconds=estimate_duration(script))

    def process(self, record: ContentRecord, result: BatchResult) -> None:
        voice = Voice.parse(record.voice) or DEFAULT_VOICE
        outcome = self.retry(lambda: self._render(record, voice), description=f"audio {record.id} {voice.value}")
        if not outcome.succeeded or outcome.value is None:
            self.fail_exhausted(record, outcome, audio_generated=False, audio_error=outcome.error)
            result.record_failure(f"Audio generation failed for {record.id}: {outcome.error}")
            return

        asset = outcome.value
        generated_at = timestamp_after(
            self.store.now(),
            parse_timestamp(record.created_at),
            parse_timestamp(record.script_generated_at),
        )
        parameters = {
            **record.parameters,
            "audio_generated": True,
            "audio_duration": asset.duration_seconds,
            "voice_used": voice.value,
        }
        self.complete(
            record,
            {
                "audio_url": asset.url,
                "duration_seconds": asset.duration_seconds,
                "audio_duration": asset.duration_seconds,
                "audio_generated_at": format_timestamp(generated_at),
                "parameters": parameters,
            },
            result,
            metadata={"voice_used": voice.value, "audio_duration": asset.duration_seconds},
        )
