"""Stage two: narrate shaped content into per-voice scripts."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from src.shared.batch.retry import RetryOutcome

from ..contracts.content_record import (
    FAN_OUT_VOICES,
    ContentRecord,
    Voice,
    format_timestamp,
    parse_timestamp,
    timestamp_after,
)
from ..contracts.errors import RecordStoreError
from ..contracts.results import BatchResult
from ..contracts.status import SCRIPT_STAGE
from ..db.event_log import EventLogger
from ..db.record_store import SupabaseRecordStore
from ..llm.openai_client import OpenAIScriptGenerator
from ..llm.prompts import build_messages, get_prompt
from .base import StageWorker
from .fan_out import FanOutGenerator

logger = logging.getLogger(__name__)

FAN_OUT_EVENT = "script_fan_out_completed"


class ScriptWorker(StageWorker):
    """Generates narration scripts for ``content_ready`` records.

    Owner-bearing records get one script in the owner's voice. Shared records
    fan out into one script per voice: voice_1 stays on the original row and
    every other successful voice becomes a new sibling row.
    """

    stage = SCRIPT_STAGE

    def __init__(
        self,
        store: SupabaseRecordStore,
        events: EventLogger,
        generator: OpenAIScriptGenerator,
        *,
        batch_size: int = 100,
        max_attempts: int = 3,
        fan_out: Optional[FanOutGenerator] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(store, events, batch_size=batch_size, max_attempts=max_attempts, **kwargs)
        self.generator = generator
        self.fan_out = fan_out or FanOutGenerator()

    def validate(self, record: ContentRecord) -> List[str]:
        errors: List[str] = []
        if get_prompt(record.kind) is None:
            errors.append(f"Unsupported content type: {record.content_type}")
        if not (record.content or "").strip():
            errors.append(f"Missing or empty content for content block {record.id}")
        if record.target_date is None:
            errors.append(f"Missing or invalid date for content block {record.id}")
        return errors

    def process(self, record: ContentRecord, result: BatchResult) -> None:
        if record.is_shared:
            self._process_shared(record, result)
        else:
            self._process_owned(record, result)

    def generate_variant(self, record: ContentRecord, voice: Voice) -> RetryOutcome[str]:
        kind = record.kind
        target = record.target_date
        if kind is None or target is None:
            raise ValueError(f"Content block {record.id} has no content type or date")
        messages = build_messages(kind, voice, record.content or "", target, record.parameters)
        return self.retry(
            lambda: self.generator.generate(messages),
            description=f"script {record.id} {voice.value}",
        )

    # ------------------------------------------------------------------
    # Owner-bearing records
    # ------------------------------------------------------------------
    def _process_owned(self, record: ContentRecord, result: BatchResult) -> None:
        voice = record.owner_voice()
        outcome = self.generate_variant(record, voice)
        if not outcome.succeeded:
            self.fail_exhausted(record, outcome)
            result.record_failure(f"Script generation failed for {record.id} ({voice.value}): {outcome.error}")
            return
        self._complete_in_place(record, voice, outcome, result)

    # ------------------------------------------------------------------
    # Shared records
    # ------------------------------------------------------------------
    def _process_shared(self, record: ContentRecord, result: BatchResult) -> None:
        outcomes = self.fan_out.generate(lambda voice: self.generate_variant(record, voice))
        primary, *others = FAN_OUT_VOICES

        written: Dict[str, str] = {}
        primary_outcome = outcomes[primary]
        if primary_outcome.succeeded:
            if self._complete_in_place(record, primary, primary_outcome, result):
                written[primary.value] = record.id
        else:
            self.fail_exhausted(record, primary_outcome)
            result.record_failure(
                f"Script generation failed for {record.id} ({primary.value}): {primary_outcome.error}"
            )

        for voice in others:
            outcome = outcomes[voice]
            if not outcome.succeeded:
                self.events.error(
                    "script_generation_failed",
                    f"Script generation failed for {voice.value}: {outcome.error}",
                    metadata=record.event_metadata(
                        stage=self.stage.name,
                        category="capability",
                        voice=voice.value,
                        retry_count=self.max_attempts if outcome.exhausted else outcome.attempts,
                        error=outcome.error,
                        original_content_block_id=record.id,
                    ),
                )
                result.record_failure(f"Script generation failed for {record.id} ({voice.value}): {outcome.error}")
                continue
            sibling_id = self._insert_sibling(record, voice, outcome.value or "", result)
            if sibling_id:
                written[voice.value] = sibling_id

        self._log_fan_out(record, written)

    def _complete_in_place(
        self,
        record: ContentRecord,
        voice: Voice,
        outcome: RetryOutcome[str],
        result: BatchResult,
    ) -> bool:
        generated_at = timestamp_after(self.store.now(), parse_timestamp(record.created_at))
        script = outcome.value or ""
        return self.complete(
            record,
            {
                "script": script,
                "voice": voice.value,
                "script_generated_at": format_timestamp(generated_at),
            },
            result,
            metadata={"voice": voice.value, "script_length": len(script), "attempts": outcome.attempts},
        )

    def _insert_sibling(
        self,
        record: ContentRecord,
        voice: Voice,
        script: str,
        result: BatchResult,
    ) -> Optional[str]:
        created_at = self.store.now()
        row = record.sibling_row(voice, script, created_at, created_at + timedelta(milliseconds=1))
        try:
            sibling = self.store.insert(row)
        except RecordStoreError as exc:
            message = f"Failed to create {voice.value} row for {record.id}: {exc}"
            logger.error(message)
            result.record_failure(message)
            self._store_failure_event(record, message, voice=voice.value, original_content_block_id=record.id)
            return None

        result.processed_count += 1
        self.events.success(
            "script_generation_success",
            f"Script generated successfully for {voice.value}",
            content_block_id=sibling.id,
            metadata=record.event_metadata(
                stage=self.stage.name,
                voice=voice.value,
                script_length=len(script),
                original_content_block_id=record.id,
            ),
        )
        return sibling.id

    def _log_fan_out(self, record: ContentRecord, written: Dict[str, str]) -> None:
        total = len(FAN_OUT_VOICES)
        if len(written) == total:
            outcome = "complete"
        elif written:
            outcome = "partial"
        else:
            outcome = "failed"
        self.events.info(
            FAN_OUT_EVENT,
            f"Fan-out {outcome} for {record.id}: {len(written)}/{total} variants written",
            content_block_id=record.id,
            metadata=record.event_metadata(
                stage=self.stage.name,
                fan_out_outcome=outcome,
                variants=written,
                lineage_id=record.lineage_id,
            ),
        )
