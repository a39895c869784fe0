"""Content block record model shared by every pipeline stage."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .status import ContentStatus

CONTENT_BLOCKS_TABLE = "content_blocks"
DEFAULT_LANGUAGE_CODE = "en-US"
LINEAGE_KEY = "source_content_block_id"


class ContentType(str, Enum):
    """Closed set of content categories."""

    WAKE_UP = "wake_up"
    STRETCH = "stretch"
    CHALLENGE = "challenge"
    WEATHER = "weather"
    ENCOURAGEMENT = "encouragement"
    HEADLINES = "headlines"
    SPORTS = "sports"
    MARKETS = "markets"
    USER_INTRO = "user_intro"
    USER_OUTRO = "user_outro"
    USER_REMINDERS = "user_reminders"
    BANANA = "banana"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ContentType"]:
        try:
            return cls(value)
        except ValueError:
            return None


class Voice(str, Enum):
    """Narration variant tags."""

    VOICE_1 = "voice_1"
    VOICE_2 = "voice_2"
    VOICE_3 = "voice_3"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Voice"]:
        try:
            return cls(value)
        except ValueError:
            return None


DEFAULT_VOICE = Voice.VOICE_1
FAN_OUT_VOICES = (Voice.VOICE_1, Voice.VOICE_2, Voice.VOICE_3)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp into an aware datetime, or None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_after(now: datetime, *floors: Optional[datetime]) -> datetime:
    """Return *now*, nudged forward so it is strictly later than every floor."""
    result = now
    for floor in floors:
        if floor is not None and result <= floor:
            result = floor + timedelta(milliseconds=1)
    return result


class ContentRecord(BaseModel):
    """One row of the ``content_blocks`` table.

    ``version`` holds the raw ``updated_at`` string exactly as the store
    returned it; the claim protocol compares against it verbatim.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    id: str
    user_id: Optional[str] = None
    content_type: str
    date: Optional[str] = None
    content_priority: int = Field(default=0)
    content: Optional[str] = None
    script: Optional[str] = None
    audio_url: Optional[str] = None
    duration_seconds: Optional[int] = None
    audio_duration: Optional[int] = None
    voice: Optional[str] = None
    status: ContentStatus
    retry_count: int = Field(default=0, ge=0)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    script_generated_at: Optional[str] = None
    audio_generated_at: Optional[str] = None
    expiration_date: Optional[str] = None
    language_code: str = Field(default=DEFAULT_LANGUAGE_CODE)
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContentRecord":
        data = dict(row)
        data["id"] = str(data["id"])
        if data.get("parameters") is None:
            data["parameters"] = {}
        if data.get("language_code") is None:
            data["language_code"] = DEFAULT_LANGUAGE_CODE
        if data.get("content_priority") is None:
            data["content_priority"] = 0
        if data.get("retry_count") is None:
            data["retry_count"] = 0
        for key in ("created_at", "updated_at", "script_generated_at", "audio_generated_at", "date", "expiration_date"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        return cls.model_validate(data)

    @property
    def version(self) -> Optional[str]:
        return self.updated_at

    @property
    def is_shared(self) -> bool:
        return self.user_id is None

    @property
    def kind(self) -> Optional[ContentType]:
        return ContentType.parse(self.content_type)

    @property
    def target_date(self) -> Optional[date]:
        if not self.date:
            return None
        try:
            return date.fromisoformat(self.date[:10])
        except ValueError:
            return None

    @property
    def lineage_id(self) -> str:
        return str(self.parameters.get(LINEAGE_KEY) or self.id)

    def owner_voice(self) -> Voice:
        """Voice used for an owner-bearing record; falls back to the default."""
        return Voice.parse(self.voice) or DEFAULT_VOICE

    def sibling_row(
        self,
        voice: Voice,
        script: str,
        created_at: datetime,
        script_generated_at: datetime,
    ) -> Dict[str, Any]:
        """Build the insert payload for a fanned-out narration variant."""

        parameters = dict(self.parameters)
        parameters[LINEAGE_KEY] = self.lineage_id
        stamp = format_timestamp(created_at)
        return {
            "user_id": None,
            "content_type": self.content_type,
            "date": self.date,
            "content": self.content,
            "content_priority": self.content_priority,
            "expiration_date": self.expiration_date,
            "language_code": self.language_code,
            "parameters": parameters,
            "voice": voice.value,
            "script": script,
            "status": ContentStatus.SCRIPT_GENERATED.value,
            "retry_count": 0,
            "created_at": stamp,
            "updated_at": format_timestamp(script_generated_at),
            "script_generated_at": format_timestamp(script_generated_at),
        }

    def event_metadata(self, **extra: Any) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "content_type": self.content_type,
            "date": self.date,
            "user_id": self.user_id,
            "voice": self.voice,
            "retry_count": self.retry_count,
        }
        metadata.update(extra)
        return metadata
