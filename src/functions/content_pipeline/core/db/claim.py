"""Optimistic claim of a content record before a stage works on it."""

from __future__ import annotations

import logging

from ..contracts.content_record import ContentRecord
from ..contracts.results import ClaimResult
from ..contracts.status import ContentStatus
from .record_store import SupabaseRecordStore

logger = logging.getLogger(__name__)


class ClaimProtocol:
    """Moves a record into its in-progress status only if nobody else has.

    The record is re-read, then updated with a filter on ``id``, the expected
    status and the re-read ``updated_at``. If any of those changed in between,
    no row matches and the claim is lost. A lost claim has no side effects.
    """

    def __init__(self, store: SupabaseRecordStore) -> None:
        self.store = store

    def claim(
        self,
        record: ContentRecord,
        expected_status: ContentStatus,
        in_progress_status: ContentStatus,
    ) -> ClaimResult:
        current = self.store.fetch_version(record.id)
        if current is None:
            logger.debug("Claim lost for %s: record no longer exists", record.id)
            return ClaimResult.lost("record not found")

        status, version = current
        if status != expected_status.value:
            logger.debug(
                "Claim lost for %s: status is %s, expected %s",
                record.id,
                status,
                expected_status.value,
            )
            return ClaimResult.lost(f"status changed to {status}")

        claimed = self.store.compare_and_set(
            record.id,
            expected_status,
            version,
            {"status": in_progress_status.value},
        )
        if claimed is None:
            logger.debug("Claim lost for %s: concurrent update", record.id)
            return ClaimResult.lost("concurrent update")

        logger.debug("Claimed %s (%s -> %s)", record.id, expected_status.value, in_progress_status.value)
        return ClaimResult.won(claimed)
