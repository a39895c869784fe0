import pytest

from src.functions.content_pipeline.core.orchestration.config_loader import (
    build_capability_settings,
    build_pipeline_settings,
    build_supabase_settings,
)
from src.shared.utils.config_validator import ConfigurationError

_ENV = (
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_KEY",
    "AUDIO_BATCH_SIZE",
    "PIPELINE_MAX_ATTEMPTS",
    "OPENAI_API_KEY",
    "ELEVEN_LABS_API_KEY",
    "SCRIPT_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_supabase_settings_require_url(monkeypatch):
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")

    with pytest.raises(ConfigurationError) as excinfo:
        build_supabase_settings()

    assert "SUPABASE_URL" in str(excinfo.value)


def test_supabase_key_falls_back_to_legacy_name(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "legacy-service-key")

    settings = build_supabase_settings()

    assert settings.key == "legacy-service-key"
    assert settings.content_table == "content_blocks"


def test_pipeline_settings_read_environment(monkeypatch):
    monkeypatch.setenv("AUDIO_BATCH_SIZE", "2")
    monkeypatch.setenv("PIPELINE_MAX_ATTEMPTS", "not-a-number")

    settings = build_pipeline_settings()

    assert settings.audio_batch_size == 2
    assert settings.max_attempts == 3
    assert settings.script_batch_size == 100


def test_pipeline_overrides_take_precedence(monkeypatch):
    monkeypatch.setenv("AUDIO_BATCH_SIZE", "2")

    assert build_pipeline_settings({"audio_batch_size": 4}).audio_batch_size == 4


def test_capability_keys_are_optional(monkeypatch):
    monkeypatch.setenv("SCRIPT_TIMEOUT_SECONDS", "12.5")

    settings = build_capability_settings()

    assert settings.openai_api_key is None
    assert settings.elevenlabs_api_key is None
    assert settings.script_timeout_seconds == 12.5


def test_out_of_range_batch_size_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("AUDIO_BATCH_SIZE", "200")

    with pytest.raises(ConfigurationError) as excinfo:
        build_pipeline_settings()

    assert "audio_batch_size" in str(excinfo.value)


def test_malformed_supabase_url_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "not a url")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")

    with pytest.raises(ConfigurationError) as excinfo:
        build_supabase_settings()

    assert "SupabaseSettings" in str(excinfo.value)
