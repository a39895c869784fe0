"""Stage workers: shape, narrate and synthesize."""

from .audio_worker import AudioWorker
from .base import StageWorker
from .content_worker import ContentWorker
from .fan_out import FanOutGenerator
from .script_worker import ScriptWorker

__all__ = ["AudioWorker", "ContentWorker", "FanOutGenerator", "ScriptWorker", "StageWorker"]
