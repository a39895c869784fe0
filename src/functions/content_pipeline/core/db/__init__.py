"""Record store, claim protocol, event sink and audio storage."""

from .audio_storage import AudioStorage
from .claim import ClaimProtocol
from .event_log import EventLogger, EventStatus
from .record_store import SupabaseRecordStore

__all__ = [
    "AudioStorage",
    "ClaimProtocol",
    "EventLogger",
    "EventStatus",
    "SupabaseRecordStore",
]
