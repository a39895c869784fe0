from datetime import date
from types import SimpleNamespace

import httpx
import pytest

from src.functions.content_pipeline.core.contracts.content_record import ContentType, Voice
from src.functions.content_pipeline.core.contracts.errors import CapabilityError, CapabilityUnavailableError
from src.functions.content_pipeline.core.llm.openai_client import OpenAIScriptGenerator
from src.functions.content_pipeline.core.llm.prompts import (
    NARRATION_PROMPTS,
    VOICE_STYLE_INSTRUCTIONS,
    build_messages,
    get_prompt,
)
from src.functions.content_pipeline.core.tts.elevenlabs_client import ElevenLabsSynthesizer
from src.functions.content_pipeline.core.tts.voices import VOICE_PROFILES, prepare_script


class _FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai(content):
    completions = _FakeCompletions(content)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIScriptGenerator(api_key="sk-test", client=client), completions


def test_messages_carry_voice_style_and_content():
    messages = build_messages(
        ContentType.WAKE_UP,
        Voice.VOICE_2,
        "Date: 2025-01-16 (Thursday).",
        date(2025, 1, 16),
        {},
    )

    assert VOICE_STYLE_INSTRUCTIONS[Voice.VOICE_2] in messages.system
    assert "ORIGINAL CONTENT:\nDate: 2025-01-16 (Thursday)." in messages.user
    assert "2025-01-16 (Thursday)" in messages.user
    assert messages.max_tokens == 500
    assert messages.temperature == 0.8


def test_personal_bookend_types_have_no_narration_prompt():
    assert get_prompt(ContentType.USER_INTRO) is None
    assert get_prompt(None) is None
    assert ContentType.HEADLINES in NARRATION_PROMPTS


def test_generator_returns_stripped_script():
    generator, completions = _openai("  It's Thursday.  ")
    messages = build_messages(ContentType.STRETCH, Voice.VOICE_1, "Neck rolls", date(2025, 1, 16), {})

    assert generator.generate(messages) == "It's Thursday."
    assert completions.kwargs["model"] == "gpt-4o"
    assert completions.kwargs["max_tokens"] == 300
    assert completions.kwargs["messages"][0]["role"] == "system"


def test_generator_rejects_empty_script():
    generator, _ = _openai("   ")
    messages = build_messages(ContentType.STRETCH, Voice.VOICE_1, "Neck rolls", date(2025, 1, 16), {})

    with pytest.raises(CapabilityError):
        generator.generate(messages)


def test_generator_without_key_is_unavailable():
    messages = build_messages(ContentType.STRETCH, Voice.VOICE_1, "Neck rolls", date(2025, 1, 16), {})

    with pytest.raises(CapabilityUnavailableError):
        OpenAIScriptGenerator(api_key=None).generate(messages)


def test_prepare_script_inserts_pauses_and_breaths():
    assert prepare_script("One. Two? <b>Three!</b>", Voice.VOICE_1) == (
        "One. [pause 2s] Two? [pause 2s] [take a breath] Three! [pause 2s]"
    )
    assert "[take a breath]" not in prepare_script("One. Two. Three. Four.", Voice.VOICE_2)


def _synthesizer(handler):
    return ElevenLabsSynthesizer(
        api_key="xi-test",
        base_url="https://tts.example.test/v1/",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_synthesizer_posts_voice_request():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["xi-api-key"]
        return httpx.Response(200, content=b"aac-bytes")

    audio = _synthesizer(handler).synthesize("Hello there.", Voice.VOICE_3)

    assert audio == b"aac-bytes"
    assert seen["url"] == f"https://tts.example.test/v1/text-to-speech/{VOICE_PROFILES[Voice.VOICE_3].voice_id}"
    assert seen["key"] == "xi-test"


def test_synthesizer_maps_error_status_to_capability_error():
    synthesizer = _synthesizer(lambda request: httpx.Response(429, text="rate limited"))

    with pytest.raises(CapabilityError) as excinfo:
        synthesizer.synthesize("Hello.", Voice.VOICE_1)

    assert excinfo.value.status_code == 429


def test_synthesizer_maps_timeouts():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(TimeoutError):
        _synthesizer(handler).synthesize("Hello.", Voice.VOICE_1)


def test_synthesizer_close_releases_connection_pool():
    transport_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"a")))
    synthesizer = ElevenLabsSynthesizer(api_key="xi-test", http_client=transport_client)

    synthesizer.close()
    synthesizer.close()

    assert transport_client.is_closed
    assert synthesizer.http is not transport_client
    synthesizer.close()
