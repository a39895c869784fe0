"""Expire records whose expiration date has passed."""

from __future__ import annotations

import logging

from ..contracts.content_record import ContentRecord
from ..contracts.errors import RecordStoreError
from ..contracts.results import ExpirationResult
from ..contracts.status import NON_TERMINAL_STATUSES, ContentStatus
from ..db.event_log import EventLogger
from ..db.record_store import SupabaseRecordStore

logger = logging.getLogger(__name__)


class ExpirationCleanup:
    """Moves non-terminal records past ``expiration_date`` to ``expired``."""

    def __init__(self, store: SupabaseRecordStore, events: EventLogger, *, batch_size: int = 500) -> None:
        self.store = store
        self.events = events
        self.batch_size = batch_size

    def run(self) -> ExpirationResult:
        result = ExpirationResult()
        today = self.store.now().date().isoformat()
        try:
            candidates = self.store.fetch_expired(NON_TERMINAL_STATUSES, today, self.batch_size)
        except RecordStoreError as exc:
            logger.error("Expiration lookup failed: %s", exc)
            self.events.error(
                "content_expiration_failed",
                f"Expiration cleanup failed: {exc}",
                metadata={"error": str(exc), "cutoff_date": today},
            )
            raise

        result.expired_found = len(candidates)
        for record in candidates:
            try:
                if self._expire(record):
                    result.expired_count += 1
            except RecordStoreError as exc:
                message = f"Failed to expire {record.id}: {exc}"
                logger.error(message)
                result.errors.append(message)

        self.events.info(
            "content_expiration_summary",
            f"Expired {result.expired_count}/{result.expired_found} content blocks",
            metadata={
                "expired_found": result.expired_found,
                "expired_count": result.expired_count,
                "error_count": len(result.errors),
                "cutoff_date": today,
            },
        )
        logger.info("Expired %d of %d content blocks", result.expired_count, result.expired_found)
        return result

    def _expire(self, record: ContentRecord) -> bool:
        updated = self.store.compare_and_set(
            record.id,
            record.status,
            record.version,
            {"status": ContentStatus.EXPIRED.value},
        )
        if updated is None:
            logger.info("Record %s changed before expiry; leaving it", record.id)
            return False
        self.events.info(
            "content_expired",
            f"Content block expired (was {record.status.value})",
            content_block_id=record.id,
            metadata=record.event_metadata(
                previous_status=record.status.value,
                expiration_date=record.expiration_date,
            ),
        )
        return True
