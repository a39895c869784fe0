"""Supabase-backed access to the ``content_blocks`` table.

Every status-changing write goes through this module. Writes are always
conditional on the status the caller expects the row to be in, and the
status edge is checked against the transition table before the request is
sent.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..contracts.content_record import (
    CONTENT_BLOCKS_TABLE,
    ContentRecord,
    format_timestamp,
    parse_timestamp,
    timestamp_after,
    utc_now,
)
from ..contracts.errors import RecordStoreError
from ..contracts.status import ContentStatus, ensure_transition

logger = logging.getLogger(__name__)

ELIGIBLE_ORDER = ("content_priority", "created_at", "id")


class SupabaseRecordStore:
    """Thin query layer over the Supabase client for content records."""

    def __init__(
        self,
        client: Any,
        *,
        table: str = CONTENT_BLOCKS_TABLE,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.table_name = table
        self._clock = clock

    def _table(self):
        return self.client.table(self.table_name)

    @staticmethod
    def _rows(response: Any) -> List[Dict[str, Any]]:
        return list(getattr(response, "data", None) or [])

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def fetch_eligible(self, status: ContentStatus, limit: int) -> List[ContentRecord]:
        """Return up to *limit* records in *status*, oldest priority first."""

        try:
            query = self._table().select("*").eq("status", status.value)
            for column in ELIGIBLE_ORDER:
                query = query.order(column, desc=False)
            response = query.limit(limit).execute()
        except Exception as exc:
            raise RecordStoreError(f"Failed to query {status.value} records: {exc}") from exc

        records: List[ContentRecord] = []
        for row in self._rows(response):
            try:
                records.append(ContentRecord.from_row(row))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping malformed content record %s: %s", row.get("id"), exc)
        return records

    def fetch_version(self, record_id: str) -> Optional[Tuple[str, Optional[str]]]:
        """Re-read the current ``status`` and ``updated_at`` of one record."""

        try:
            response = (
                self._table()
                .select("status, updated_at")
                .eq("id", record_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise RecordStoreError(f"Failed to read version of {record_id}: {exc}") from exc

        rows = self._rows(response)
        if not rows:
            return None
        row = rows[0]
        updated_at = row.get("updated_at")
        return str(row.get("status")), (str(updated_at) if updated_at is not None else None)

    def fetch_stale(
        self,
        statuses: Iterable[ContentStatus],
        older_than: datetime,
        limit: int,
    ) -> List[ContentRecord]:
        """Return records in *statuses* whose ``updated_at`` is before *older_than*."""

        values = [status.value for status in statuses]
        try:
            response = (
                self._table()
                .select("*")
                .in_("status", values)
                .lt("updated_at", format_timestamp(older_than))
                .order("updated_at", desc=False)
                .limit(limit)
                .execute()
            )
        except Exception as exc:
            raise RecordStoreError(f"Failed to query stale records: {exc}") from exc
        return [ContentRecord.from_row(row) for row in self._rows(response)]

    def fetch_expired(
        self,
        statuses: Iterable[ContentStatus],
        before_date: str,
        limit: int,
    ) -> List[ContentRecord]:
        """Return records in *statuses* whose ``expiration_date`` is before *before_date*."""

        values = [status.value for status in statuses]
        try:
            response = (
                self._table()
                .select("*")
                .in_("status", values)
                .lt("expiration_date", before_date)
                .order("expiration_date", desc=False)
                .limit(limit)
                .execute()
            )
        except Exception as exc:
            raise RecordStoreError(f"Failed to query expired records: {exc}") from exc
        return [ContentRecord.from_row(row) for row in self._rows(response)]

    def count_by_status(self, statuses: Iterable[ContentStatus]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for status in statuses:
            try:
                response = (
                    self._table()
                    .select("id", count="exact")
                    .eq("status", status.value)
                    .limit(1)
                    .execute()
                )
            except Exception as exc:
                raise RecordStoreError(f"Failed to count {status.value} records: {exc}") from exc
            count = getattr(response, "count", None)
            counts[status.value] = int(count) if count is not None else len(self._rows(response))
        return counts

    def count_stale(self, statuses: Iterable[ContentStatus], older_than: datetime) -> int:
        values = [status.value for status in statuses]
        try:
            response = (
                self._table()
                .select("id", count="exact")
                .in_("status", values)
                .lt("updated_at", format_timestamp(older_than))
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise RecordStoreError(f"Failed to count stale records: {exc}") from exc
        count = getattr(response, "count", None)
        return int(count) if count is not None else len(self._rows(response))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def compare_and_set(
        self,
        record_id: str,
        expected_status: ContentStatus,
        expected_version: Optional[str],
        changes: Dict[str, Any],
    ) -> Optional[ContentRecord]:
        """Apply *changes* only if status and ``updated_at`` still match.

        Returns the updated record, or None when no row matched.
        """

        payload = self._prepare(expected_status, changes, floor=parse_timestamp(expected_version))
        query = (
            self._table()
            .update(payload)
            .eq("id", record_id)
            .eq("status", expected_status.value)
        )
        if expected_version is None:
            query = query.is_("updated_at", "null")
        else:
            query = query.eq("updated_at", expected_version)
        return self._first(query, record_id)

    def update_if_status(
        self,
        record: ContentRecord,
        expected_status: ContentStatus,
        changes: Dict[str, Any],
    ) -> Optional[ContentRecord]:
        """Apply *changes* only if the row is still in *expected_status*."""

        payload = self._prepare(expected_status, changes, floor=parse_timestamp(record.updated_at))
        query = (
            self._table()
            .update(payload)
            .eq("id", record.id)
            .eq("status", expected_status.value)
        )
        return self._first(query, record.id)

    def insert(self, row: Dict[str, Any]) -> ContentRecord:
        try:
            response = self._table().insert(row).execute()
        except Exception as exc:
            raise RecordStoreError(f"Failed to insert content record: {exc}") from exc
        rows = self._rows(response)
        if not rows:
            raise RecordStoreError("Insert returned no row")
        return ContentRecord.from_row(rows[0])

    def _prepare(
        self,
        expected_status: ContentStatus,
        changes: Dict[str, Any],
        *,
        floor: Optional[datetime],
    ) -> Dict[str, Any]:
        payload = dict(changes)
        target = payload.get("status")
        if target is not None:
            ensure_transition(expected_status, ContentStatus(target))
            payload["status"] = ContentStatus(target).value
        if "updated_at" not in payload:
            payload["updated_at"] = format_timestamp(timestamp_after(self.now(), floor))
        return payload

    def _first(self, query: Any, record_id: str) -> Optional[ContentRecord]:
        try:
            response = query.execute()
        except Exception as exc:
            raise RecordStoreError(f"Failed to update {record_id}: {exc}") from exc
        rows = self._rows(response)
        if not rows:
            return None
        return ContentRecord.from_row(rows[0])
