"""Data contracts for the content pipeline."""

from .config import CapabilitySettings, PipelineSettings, SupabaseSettings
from .content_record import ContentRecord, ContentType, Voice
from .errors import CapabilityError, CapabilityUnavailableError, RecordStoreError
from .results import BatchResult, ClaimOutcome, ClaimResult
from .status import (
    AUDIO_STAGE,
    CONTENT_STAGE,
    SCRIPT_STAGE,
    ContentStatus,
    InvalidTransitionError,
    StageDefinition,
)

__all__ = [
    "AUDIO_STAGE",
    "BatchResult",
    "CONTENT_STAGE",
    "CapabilityError",
    "CapabilitySettings",
    "CapabilityUnavailableError",
    "ClaimOutcome",
    "ClaimResult",
    "ContentRecord",
    "ContentStatus",
    "ContentType",
    "InvalidTransitionError",
    "PipelineSettings",
    "RecordStoreError",
    "SCRIPT_STAGE",
    "StageDefinition",
    "SupabaseSettings",
    "Voice",
]
