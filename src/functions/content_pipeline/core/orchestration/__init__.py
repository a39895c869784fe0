"""Configuration loading and component wiring."""

from .config_loader import build_capability_settings, build_pipeline_settings, build_supabase_settings
from .factory import PipelineFactory

__all__ = [
    "PipelineFactory",
    "build_capability_settings",
    "build_pipeline_settings",
    "build_supabase_settings",
]
