"""HTTP client for ElevenLabs text-to-speech."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..contracts.content_record import Voice
from ..contracts.errors import CapabilityError, CapabilityUnavailableError
from .voices import build_tts_request, get_profile

logger = logging.getLogger(__name__)

CAPABILITY = "speech_synthesis"
DEFAULT_BASE_URL = "https://api.elevenlabs.io/v1"


class ElevenLabsSynthesizer:
    """Synthesizes AAC audio for a narration script."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 60.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._http = http_client

    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=httpx.Timeout(self.timeout_seconds, connect=10.0))
        return self._http

    def synthesize(self, script: str, voice: Voice) -> bytes:
        if not self._api_key:
            raise CapabilityUnavailableError("ELEVEN_LABS_API_KEY is not configured")

        profile = get_profile(voice)
        url = f"{self.base_url}/text-to-speech/{profile.voice_id}"
        headers = {
            "Accept": "audio/aac",
            "Content-Type": "application/json",
            "xi-api-key": self._api_key,
        }
        try:
            response = self.http.post(
                url,
                headers=headers,
                json=build_tts_request(script, voice),
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise TimeoutError(f"ElevenLabs request timed out after {self.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise ConnectionError(f"ElevenLabs request failed: {exc}") from exc

        if response.status_code >= 400:
            raise CapabilityError(
                CAPABILITY,
                f"ElevenLabs API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        audio = response.content
        if not audio:
            raise CapabilityError(CAPABILITY, "ElevenLabs returned empty audio")

        logger.debug("Synthesized %d bytes with voice %s (%s)", len(audio), voice.value, profile.name)
        return audio

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None
