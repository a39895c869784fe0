"""Speech synthesis client and voice profiles."""

from .elevenlabs_client import ElevenLabsSynthesizer
from .voices import VOICE_PROFILES, build_tts_request, prepare_script

__all__ = ["ElevenLabsSynthesizer", "VOICE_PROFILES", "build_tts_request", "prepare_script"]
