"""Pipeline health snapshot from the status distribution."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, List

from ..contracts.content_record import format_timestamp
from ..contracts.results import HealthReport
from ..contracts.status import (
    FAILURE_STATUSES,
    IN_PROGRESS_STATUSES,
    STAGES,
    ContentStatus,
)
from ..db.record_store import SupabaseRecordStore

logger = logging.getLogger(__name__)

QUEUE_WARNING_THRESHOLD = 20
QUEUE_CRITICAL_THRESHOLD = 50
QUEUE_BLOCKAGE_THRESHOLD = 100
FAILURE_RATE_WARNING_PERCENT = 10.0
FAILURE_RATE_CRITICAL_PERCENT = 20.0

_SEVERITY = {"healthy": 0, "warning": 1, "critical": 2}


class PipelineMonitor:
    """Reports queue depths, stuck records and failure rate.

    Read-only; alert delivery is left to whoever consumes the report.
    """

    def __init__(self, store: SupabaseRecordStore, *, stuck_timeout_minutes: int = 60) -> None:
        self.store = store
        self.stuck_timeout_minutes = stuck_timeout_minutes

    def check(self) -> HealthReport:
        now = self.store.now()
        counts = self.store.count_by_status(ContentStatus)
        stuck_count = self.store.count_stale(
            IN_PROGRESS_STATUSES,
            now - timedelta(minutes=self.stuck_timeout_minutes),
        )
        return evaluate(counts, stuck_count, checked_at=format_timestamp(now))


def evaluate(counts: Dict[str, int], stuck_count: int, *, checked_at: str) -> HealthReport:
    """Apply the alert thresholds to a status distribution."""

    total = sum(counts.values())
    failed = sum(counts.get(status.value, 0) for status in FAILURE_STATUSES)
    in_progress = sum(counts.get(status.value, 0) for status in IN_PROGRESS_STATUSES)
    failure_rate = round((failed / total) * 100, 2) if total else 0.0
    queue_depths = {stage.input_status.value: counts.get(stage.input_status.value, 0) for stage in STAGES}

    level = "healthy"
    issues: List[str] = []

    def raise_to(new_level: str, issue: str) -> None:
        nonlocal level
        if _SEVERITY[new_level] > _SEVERITY[level]:
            level = new_level
        issues.append(issue)

    for status, depth in queue_depths.items():
        if depth > QUEUE_BLOCKAGE_THRESHOLD:
            raise_to("critical", f"Pipeline blockage detected: {depth} items waiting in {status}")
        elif depth > QUEUE_CRITICAL_THRESHOLD:
            raise_to("critical", f"Critical queue depth: {depth} {status}")
        elif depth > QUEUE_WARNING_THRESHOLD:
            raise_to("warning", f"Queue depth warning: {depth} {status}")

    if stuck_count > 0:
        raise_to("warning", f"{stuck_count} content block(s) stuck in progress")

    if failure_rate > FAILURE_RATE_CRITICAL_PERCENT:
        raise_to("critical", f"Critical failure rate: {failure_rate:.1f}%")
    elif failure_rate > FAILURE_RATE_WARNING_PERCENT:
        raise_to("warning", f"High failure rate detected: {failure_rate:.1f}%")

    recommendations: List[str] = []
    if level == "critical":
        recommendations.append("Immediate attention required for critical issues")
    elif level == "warning":
        recommendations.append("Monitor warning conditions closely")
    if failure_rate > FAILURE_RATE_WARNING_PERCENT:
        recommendations.append("Investigate content generation failures")
    if stuck_count > 0:
        recommendations.append("Run stuck content cleanup")
    if counts.get(ContentStatus.EXPIRED.value, 0) > QUEUE_WARNING_THRESHOLD:
        recommendations.append("Run expiration cleanup function")

    if issues:
        logger.warning("Pipeline health %s: %s", level, "; ".join(issues))

    return HealthReport(
        overall_status=level,
        status_counts=dict(counts),
        queue_depths=queue_depths,
        in_progress_count=in_progress,
        stuck_count=stuck_count,
        failed_count=failed,
        failure_rate=failure_rate,
        issues=issues,
        recommendations=recommendations,
        checked_at=checked_at,
    )
