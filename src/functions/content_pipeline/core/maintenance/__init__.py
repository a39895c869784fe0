"""Housekeeping jobs: stuck recovery, expiration and health monitoring."""

from .expiration import ExpirationCleanup
from .monitor import PipelineMonitor, evaluate
from .stuck_recovery import StuckContentRecovery

__all__ = ["ExpirationCleanup", "PipelineMonitor", "StuckContentRecovery", "evaluate"]
