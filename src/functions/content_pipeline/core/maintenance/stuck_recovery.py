"""Move records abandoned in an in-progress status to their failure status."""

from __future__ import annotations

import logging
from datetime import timedelta

from ..contracts.content_record import ContentRecord, format_timestamp
from ..contracts.errors import RecordStoreError
from ..contracts.results import StuckCleanupResult
from ..contracts.status import FAILURE_STATUS_FOR_IN_PROGRESS, IN_PROGRESS_STATUSES
from ..db.event_log import EventLogger, EventStatus
from ..db.record_store import SupabaseRecordStore

logger = logging.getLogger(__name__)


class StuckContentRecovery:
    """Fails records whose claim was never completed.

    A record counts as stuck when it has been in an in-progress status for
    longer than ``timeout_minutes``. Each update is conditional on the status
    and ``updated_at`` that were read, so a worker finishing in the meantime
    wins.
    """

    def __init__(
        self,
        store: SupabaseRecordStore,
        events: EventLogger,
        *,
        timeout_minutes: int = 60,
        batch_size: int = 500,
    ) -> None:
        self.store = store
        self.events = events
        self.timeout_minutes = timeout_minutes
        self.batch_size = batch_size

    def run(self) -> StuckCleanupResult:
        result = StuckCleanupResult()
        now = self.store.now()
        cutoff = now - timedelta(minutes=self.timeout_minutes)
        try:
            stuck = self.store.fetch_stale(IN_PROGRESS_STATUSES, cutoff, self.batch_size)
        except RecordStoreError as exc:
            logger.error("Stuck content lookup failed: %s", exc)
            self.events.error(
                "cleanup_stuck_content_failed",
                f"Stuck content cleanup failed: {exc}",
                metadata={"error": str(exc), "stuck_timeout_minutes": self.timeout_minutes},
            )
            raise

        result.stuck_found = len(stuck)
        if not stuck:
            logger.info("No stuck content blocks found")
            self.events.info(
                "cleanup_stuck_content_no_blocks",
                "No stuck content blocks found during cleanup",
                metadata={"stuck_timeout_minutes": self.timeout_minutes, "cutoff_time": format_timestamp(cutoff)},
            )
            return result

        for record in stuck:
            try:
                if self._recover(record, format_timestamp(now)):
                    result.cleaned_count += 1
                    key = record.status.value
                    result.status_breakdown[key] = result.status_breakdown.get(key, 0) + 1
            except RecordStoreError as exc:
                message = f"Failed to clean up {record.id}: {exc}"
                logger.error(message)
                result.errors.append(message)

        self.events.emit(
            "cleanup_stuck_content_summary",
            EventStatus.WARNING if result.cleaned_count else EventStatus.INFO,
            f"Stuck content cleanup completed: {result.cleaned_count}/{result.stuck_found} blocks cleaned",
            metadata={
                "stuck_blocks_found": result.stuck_found,
                "blocks_cleaned": result.cleaned_count,
                "error_count": len(result.errors),
                "status_breakdown": result.status_breakdown,
                "stuck_timeout_minutes": self.timeout_minutes,
                "cutoff_time": format_timestamp(cutoff),
            },
        )
        logger.info("Cleaned %d of %d stuck content blocks", result.cleaned_count, result.stuck_found)
        return result

    def _recover(self, record: ContentRecord, cleanup_timestamp: str) -> bool:
        failure_status = FAILURE_STATUS_FOR_IN_PROGRESS[record.status]
        parameters = {
            **record.parameters,
            "stuck_cleanup": True,
            "original_status": record.status.value,
            "cleanup_timestamp": cleanup_timestamp,
        }
        updated = self.store.compare_and_set(
            record.id,
            record.status,
            record.version,
            {"status": failure_status.value, "parameters": parameters},
        )
        if updated is None:
            logger.info("Stuck record %s changed before cleanup; leaving it", record.id)
            return False

        self.events.warning(
            "cleanup_stuck_content_success",
            f"Cleaned up stuck content block: {record.status.value} timed out after {self.timeout_minutes} minute(s)",
            content_block_id=record.id,
            metadata=record.event_metadata(
                stuck_status=record.status.value,
                failure_status=failure_status.value,
                original_updated_at=record.updated_at,
            ),
        )
        return True
