"""Wire stage workers and housekeeping jobs from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from src.shared.db.connection import SupabaseConfig, get_supabase_client

from ..contracts.config import CapabilitySettings, PipelineSettings, SupabaseSettings
from ..db.audio_storage import AudioStorage
from ..db.event_log import EventLogger
from ..db.record_store import SupabaseRecordStore
from ..llm.openai_client import OpenAIScriptGenerator
from ..maintenance.expiration import ExpirationCleanup
from ..maintenance.monitor import PipelineMonitor
from ..maintenance.stuck_recovery import StuckContentRecovery
from ..tts.elevenlabs_client import ElevenLabsSynthesizer
from ..workers.audio_worker import AudioWorker
from ..workers.content_worker import ContentWorker
from ..workers.fan_out import FanOutGenerator
from ..workers.script_worker import ScriptWorker
from .config_loader import build_capability_settings, build_pipeline_settings, build_supabase_settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineFactory:
    """Builds pipeline components that share one Supabase client."""

    client: Any
    pipeline: PipelineSettings
    capabilities: CapabilitySettings
    content_table: str = "content_blocks"
    logs_table: str = "logs"

    @classmethod
    def from_env(
        cls,
        *,
        client: Optional[Any] = None,
        supabase: Optional[SupabaseSettings] = None,
    ) -> "PipelineFactory":
        """Build a factory from environment configuration.

        Raises:
            ConfigurationError: If Supabase credentials are missing or any
                setting is out of range.
        """
        supabase = supabase or build_supabase_settings()
        pipeline = build_pipeline_settings()
        capabilities = build_capability_settings()
        if client is None:
            client = get_supabase_client(
                SupabaseConfig(url=str(supabase.url), key=supabase.key, schema=supabase.schema)
            )
        return cls(
            client=client,
            pipeline=pipeline,
            capabilities=capabilities,
            content_table=supabase.content_table,
            logs_table=supabase.logs_table,
        )

    def store(self) -> SupabaseRecordStore:
        return SupabaseRecordStore(self.client, table=self.content_table)

    def events(self) -> EventLogger:
        return EventLogger(self.client, table=self.logs_table)

    def content_worker(self) -> ContentWorker:
        return ContentWorker(
            self.store(),
            self.events(),
            batch_size=self.pipeline.content_batch_size,
            max_attempts=self.pipeline.max_attempts,
        )

    def script_worker(self) -> ScriptWorker:
        generator = OpenAIScriptGenerator(
            api_key=self.capabilities.openai_api_key,
            model=self.capabilities.openai_model,
            timeout_seconds=self.capabilities.script_timeout_seconds,
        )
        return ScriptWorker(
            self.store(),
            self.events(),
            generator,
            batch_size=self.pipeline.script_batch_size,
            max_attempts=self.pipeline.max_attempts,
            fan_out=FanOutGenerator(max_workers=self.pipeline.fan_out_workers),
        )

    def audio_worker(self) -> AudioWorker:
        synthesizer = ElevenLabsSynthesizer(
            api_key=self.capabilities.elevenlabs_api_key,
            base_url=self.capabilities.elevenlabs_base_url,
            timeout_seconds=self.capabilities.audio_timeout_seconds,
        )
        return AudioWorker(
            self.store(),
            self.events(),
            synthesizer,
            AudioStorage(self.client, bucket=self.capabilities.audio_bucket),
            batch_size=self.pipeline.audio_batch_size,
            max_attempts=self.pipeline.max_attempts,
        )

    def stuck_recovery(self) -> StuckContentRecovery:
        return StuckContentRecovery(
            self.store(),
            self.events(),
            timeout_minutes=self.pipeline.stuck_timeout_minutes,
            batch_size=self.pipeline.housekeeping_batch_size,
        )

    def expiration(self) -> ExpirationCleanup:
        return ExpirationCleanup(
            self.store(),
            self.events(),
            batch_size=self.pipeline.housekeeping_batch_size,
        )

    def monitor(self) -> PipelineMonitor:
        return PipelineMonitor(self.store(), stuck_timeout_minutes=self.pipeline.stuck_timeout_minutes)
