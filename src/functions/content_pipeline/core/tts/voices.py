"""ElevenLabs voice settings and script pacing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..contracts.content_record import DEFAULT_VOICE, Voice

logger = logging.getLogger(__name__)

MODEL_ID = "eleven_multilingual_v2"
CHARACTER_LIMIT = 5000
BREATH_MARKER = "[take a breath]"

_HTML_TAG = re.compile(r"<[^>]*>")
_SENTENCE_BREAK = re.compile(r"(?<=[.?!])\s+")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class VoiceProfile:
    voice_id: str
    name: str
    description: str
    stability: float
    similarity_boost: float
    style: float
    use_speaker_boost: bool = True
    pause_seconds: str = "1s"
    breath_every: int = 0
    model_id: str = MODEL_ID

    def voice_settings(self) -> Dict[str, Any]:
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
        }


VOICE_PROFILES: Dict[Voice, VoiceProfile] = {
    Voice.VOICE_1: VoiceProfile(
        voice_id="wdRkW5c5eYi8vKR8E4V9",
        name="Grace",
        description="Female meditative wake up voice with soft pacing and calm rhythm",
        stability=0.5,
        similarity_boost=0.75,
        style=0.1,
        pause_seconds="2s",
        breath_every=2,
    ),
    Voice.VOICE_2: VoiceProfile(
        voice_id="wBXNqKUATyqu0RtYt25i",
        name="Adam",
        description="Male drill sergeant voice with high energy and commanding authority",
        stability=0.3,
        similarity_boost=0.6,
        style=0.2,
        pause_seconds="0.5s",
        breath_every=0,
    ),
    Voice.VOICE_3: VoiceProfile(
        voice_id="QczW7rKFMVYyubTC1QDk",
        name="Matthew",
        description="Male narrative voice with a calm, neutral tone and medium pacing",
        stability=0.4,
        similarity_boost=0.75,
        style=0.0,
        pause_seconds="1s",
        breath_every=3,
    ),
}


def get_profile(voice: Optional[Voice]) -> VoiceProfile:
    return VOICE_PROFILES[voice or DEFAULT_VOICE]


def prepare_script(text: str, voice: Voice) -> str:
    """Truncate, strip markup and insert pause/breath markers for *voice*."""

    profile = get_profile(voice)
    if len(text) > CHARACTER_LIMIT:
        logger.warning("Script length %d exceeds %d characters; truncating", len(text), CHARACTER_LIMIT)
        text = text[:CHARACTER_LIMIT]

    cleaned = _HTML_TAG.sub("", text).strip()
    output: List[str] = []
    for index, sentence in enumerate(_SENTENCE_BREAK.split(cleaned), start=1):
        output.append(sentence)
        output.append(f"[pause {profile.pause_seconds}]")
        if profile.breath_every and index % profile.breath_every == 0:
            output.append(BREATH_MARKER)
    return _WHITESPACE.sub(" ", " ".join(output)).strip()


def build_tts_request(text: str, voice: Voice) -> Dict[str, Any]:
    profile = get_profile(voice)
    return {
        "text": prepare_script(text, voice),
        "model_id": profile.model_id,
        "voice_settings": profile.voice_settings(),
    }
