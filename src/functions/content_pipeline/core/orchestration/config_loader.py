"""Utility helpers to construct pipeline configuration from the environment."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.shared.utils.config_validator import (
    ConfigurationError,
    int_from_env,
    optional_env,
    require_env,
)
from ..contracts.config import CapabilitySettings, PipelineSettings, SupabaseSettings

logger = logging.getLogger(__name__)

SettingsT = TypeVar("SettingsT", bound=BaseModel)


def _validated(model: Type[SettingsT], **values: Any) -> SettingsT:
    """Build *model*, reporting out-of-range values as a ConfigurationError."""
    try:
        return model(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid {model.__name__}: {problems}") from exc


def float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Invalid number for %s=%s, using %s", name, value, default)
        return default


def build_supabase_settings(overrides: Optional[Dict[str, object]] = None) -> SupabaseSettings:
    """Build Supabase settings with validation."""
    overrides = overrides or {}
    try:
        url = overrides.get("url") or require_env("SUPABASE_URL", "Supabase project URL")
        key = overrides.get("key") or require_env(
            "SUPABASE_SERVICE_ROLE_KEY",
            "Supabase service role key",
            fallbacks=("SUPABASE_KEY",),
        )
    except ConfigurationError as exc:
        raise ConfigurationError(
            f"{exc}\nRequired for the content pipeline. "
            "See .env.example for configuration template."
        ) from exc

    return _validated(
        SupabaseSettings,
        url=url,
        key=key,
        schema=overrides.get("schema") or os.getenv("SUPABASE_SCHEMA", "public"),
        content_table=overrides.get("content_table") or os.getenv("CONTENT_BLOCKS_TABLE", "content_blocks"),
        logs_table=overrides.get("logs_table") or os.getenv("PIPELINE_LOGS_TABLE", "logs"),
    )


def build_pipeline_settings(overrides: Optional[Dict[str, object]] = None) -> PipelineSettings:
    overrides = overrides or {}

    def pick(key: str, env_name: str, default: int) -> int:
        override = overrides.get(key)
        if override is not None:
            return int(override)
        return int_from_env(env_name, default, min_value=1)

    return _validated(
        PipelineSettings,
        content_batch_size=pick("content_batch_size", "CONTENT_BATCH_SIZE", 100),
        script_batch_size=pick("script_batch_size", "SCRIPT_BATCH_SIZE", 100),
        audio_batch_size=pick("audio_batch_size", "AUDIO_BATCH_SIZE", 5),
        max_attempts=pick("max_attempts", "PIPELINE_MAX_ATTEMPTS", 3),
        fan_out_workers=pick("fan_out_workers", "FAN_OUT_WORKERS", 3),
        stuck_timeout_minutes=pick("stuck_timeout_minutes", "STUCK_TIMEOUT_MINUTES", 60),
        housekeeping_batch_size=pick("housekeeping_batch_size", "HOUSEKEEPING_BATCH_SIZE", 500),
    )


def build_capability_settings(overrides: Optional[Dict[str, object]] = None) -> CapabilitySettings:
    """Credentials may be absent; the affected stage then fails per record instead of at startup."""
    overrides = overrides or {}
    openai_key = overrides.get("openai_api_key") or optional_env("OPENAI_API_KEY")
    elevenlabs_key = overrides.get("elevenlabs_api_key") or optional_env("ELEVEN_LABS_API_KEY")
    if not openai_key:
        logger.warning("OPENAI_API_KEY is not set; script generation will fail")
    if not elevenlabs_key:
        logger.warning("ELEVEN_LABS_API_KEY is not set; audio generation will fail")

    return _validated(
        CapabilitySettings,
        openai_api_key=openai_key,
        openai_model=overrides.get("openai_model") or os.getenv("OPENAI_MODEL", "gpt-4o"),
        script_timeout_seconds=float_from_env("SCRIPT_TIMEOUT_SECONDS", 30.0),
        elevenlabs_api_key=elevenlabs_key,
        audio_timeout_seconds=float_from_env("AUDIO_TIMEOUT_SECONDS", 60.0),
        audio_bucket=overrides.get("audio_bucket") or os.getenv("AUDIO_BUCKET", "audio-files"),
    )
