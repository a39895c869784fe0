"""Configuration models for the content pipeline."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, HttpUrl


class SupabaseSettings(BaseModel):
    """Settings required to reach the record store and event log."""

    url: HttpUrl = Field(..., description="Supabase project URL")
    key: str = Field(..., min_length=10, description="Supabase service role key")
    schema: str = Field(default="public", description="Target database schema")
    content_table: str = Field(default="content_blocks", description="Table holding content records")
    logs_table: str = Field(default="logs", description="Table receiving pipeline events")


class PipelineSettings(BaseModel):
    """Operational knobs shared by the stage workers and housekeeping jobs."""

    content_batch_size: int = Field(default=100, ge=1, le=1000)
    script_batch_size: int = Field(default=100, ge=1, le=1000)
    audio_batch_size: int = Field(default=5, ge=1, le=100)
    max_attempts: int = Field(default=3, ge=1, le=10)
    fan_out_workers: int = Field(default=3, ge=1, le=8)
    stuck_timeout_minutes: int = Field(default=60, ge=1)
    housekeeping_batch_size: int = Field(
        default=500,
        ge=1,
        description="Upper bound on rows touched by one cleanup or expiration run",
    )


class CapabilitySettings(BaseModel):
    """Credentials and limits for text generation, speech synthesis and storage."""

    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o")
    script_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    elevenlabs_api_key: Optional[str] = Field(default=None, description="ElevenLabs API key")
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io/v1")
    audio_timeout_seconds: float = Field(default=60.0, gt=0, le=600)
    audio_bucket: str = Field(default="audio-files", min_length=1)
