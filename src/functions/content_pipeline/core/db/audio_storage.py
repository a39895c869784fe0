"""Upload synthesized audio to Supabase Storage."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from ..contracts.content_record import utc_now
from ..contracts.errors import CapabilityError

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_BUCKET = "audio-files"
AUDIO_CONTENT_TYPE = "audio/aac"


class AudioStorage:
    """Stores audio files under ``{content_type}/{id}_{voice}_{timestamp}.aac``."""

    def __init__(
        self,
        client: Any,
        *,
        bucket: str = DEFAULT_AUDIO_BUCKET,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.bucket = bucket
        self._clock = clock

    def build_path(self, content_type: str, record_id: str, voice: str) -> str:
        stamp = self._clock().strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        return f"{content_type}/{record_id}_{voice}_{stamp}.aac"

    def upload(self, audio: bytes, *, content_type: str, record_id: str, voice: str) -> str:
        """Upload *audio* and return its public URL.

        Raises:
            CapabilityError: If the upload or URL lookup fails.
        """
        path = self.build_path(content_type, record_id, voice)
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                audio,
                {"content-type": AUDIO_CONTENT_TYPE, "cache-control": "3600", "upsert": "false"},
            )
            public_url = bucket.get_public_url(path)
        except Exception as exc:
            raise CapabilityError("storage", f"upload of {path} failed: {exc}") from exc

        if not public_url:
            raise CapabilityError("storage", f"no public URL returned for {path}")
        logger.debug("Uploaded %d bytes to %s/%s", len(audio), self.bucket, path)
        return str(public_url).rstrip("?")
