"""Shared batch loop for the three stage workers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar

from src.shared.batch.retry import RetryOutcome, with_retry

from ..contracts.content_record import ContentRecord
from ..contracts.errors import RecordStoreError
from ..contracts.results import BatchResult
from ..contracts.status import StageDefinition
from ..db.claim import ClaimProtocol
from ..db.event_log import EventLogger
from ..db.record_store import SupabaseRecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StageWorker:
    """Select, claim, validate, generate and persist one batch of records.

    Subclasses set ``stage`` and implement ``validate`` and ``process``.
    Per-record failures are captured in the BatchResult; only a failure to
    read the batch propagates.
    """

    stage: StageDefinition

    def __init__(
        self,
        store: SupabaseRecordStore,
        events: EventLogger,
        *,
        batch_size: int,
        max_attempts: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.events = events
        self.claims = ClaimProtocol(store)
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Batch loop
    # ------------------------------------------------------------------
    def run_batch(self, limit: Optional[int] = None) -> BatchResult:
        result = BatchResult(stage=self.stage.name)
        size = limit or self.batch_size
        try:
            records = self.store.fetch_eligible(self.stage.input_status, size)
        except RecordStoreError as exc:
            logger.error("Failed to read %s batch: %s", self.stage.name, exc)
            self.events.error(
                f"{self.stage.event_prefix}_batch_failed",
                f"Failed to read {self.stage.input_status.value} records: {exc}",
                metadata={"stage": self.stage.name, "error": str(exc)},
            )
            raise

        logger.info("Found %d %s record(s) for %s stage", len(records), self.stage.input_status.value, self.stage.name)
        for record in records:
            try:
                self._handle(record, result)
            except Exception as exc:  # noqa: BLE001 - one record never aborts the batch
                logger.exception("Unexpected error processing %s", record.id)
                result.record_failure(f"Content block {record.id}: {exc}")
                self.events.error(
                    f"{self.stage.event_prefix}_failed",
                    f"Processing failed for {record.id}: {exc}",
                    content_block_id=record.id,
                    metadata=record.event_metadata(stage=self.stage.name, error=str(exc)),
                )

        logger.info(
            "%s stage complete: %d processed, %d failed, %d skipped",
            self.stage.name,
            result.processed_count,
            result.failed_count,
            result.skipped_count,
        )
        return result

    def _handle(self, record: ContentRecord, result: BatchResult) -> None:
        claim = self.claims.claim(record, self.stage.input_status, self.stage.in_progress_status)
        if not claim.claimed:
            logger.info("Skipping %s: %s", record.id, claim.reason)
            result.skipped_count += 1
            return

        claimed = claim.record or record
        try:
            problems = self.validate(claimed)
            if problems:
                message = "; ".join(problems)
                self.fail(claimed, message, category="validation")
                result.record_failure(f"Validation failed for {claimed.id}: {message}")
                return

            self.events.info(
                f"{self.stage.event_prefix}_started",
                f"Starting {self.stage.name} generation for {claimed.content_type}",
                content_block_id=claimed.id,
                metadata=claimed.event_metadata(stage=self.stage.name, is_user_content=not claimed.is_shared),
            )
            self.process(claimed, result)
        except Exception as exc:  # noqa: BLE001 - a claimed record must not stay in progress
            logger.exception("Unexpected error processing %s", claimed.id)
            self.fail(claimed, f"Unexpected error: {exc}", category="unexpected")
            result.record_failure(f"Content block {claimed.id}: {exc}")

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def validate(self, record: ContentRecord) -> List[str]:
        raise NotImplementedError

    def process(self, record: ContentRecord, result: BatchResult) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def retry(self, operation: Callable[[], T], description: str) -> RetryOutcome[T]:
        return with_retry(
            operation,
            self.max_attempts,
            sleep=self._sleep,
            description=description,
        )

    def complete(
        self,
        record: ContentRecord,
        changes: Dict[str, Any],
        result: BatchResult,
        *,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Advance *record* to the stage output status if it is still ours."""

        payload = {**changes, "status": self.stage.output_status.value, "retry_count": 0}
        try:
            updated = self.store.update_if_status(record, self.stage.in_progress_status, payload)
        except RecordStoreError as exc:
            message = f"Failed to update {record.id}: {exc}"
            logger.error(message)
            result.record_failure(message)
            self._store_failure_event(record, message)
            return False
        if updated is None:
            message = f"Content block {record.id} left {self.stage.in_progress_status.value} before completion"
            logger.warning(message)
            result.record_failure(message)
            self._store_failure_event(record, message)
            return False

        result.processed_count += 1
        self.events.success(
            f"{self.stage.event_prefix}_success",
            f"{self.stage.name.capitalize()} generated for {record.content_type}",
            content_block_id=record.id,
            metadata=record.event_metadata(stage=self.stage.name, **(metadata or {})),
        )
        return True

    def fail(
        self,
        record: ContentRecord,
        message: str,
        *,
        category: str,
        retry_count: Optional[int] = None,
        extra_parameters: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Move *record* to the stage failure status, leaving outputs untouched."""

        parameters = dict(record.parameters)
        parameters[f"{self.stage.name}_error"] = message
        if extra_parameters:
            parameters.update(extra_parameters)
        payload: Dict[str, Any] = {"status": self.stage.failure_status.value, "parameters": parameters}
        if retry_count is not None:
            payload["retry_count"] = retry_count

        written = False
        try:
            written = self.store.update_if_status(record, self.stage.in_progress_status, payload) is not None
        except RecordStoreError as exc:
            logger.error("Failed to mark %s as %s: %s", record.id, self.stage.failure_status.value, exc)

        self.events.error(
            f"{self.stage.event_prefix}_failed",
            f"{self.stage.name.capitalize()} generation failed for {record.id}: {message}",
            content_block_id=record.id,
            metadata=record.event_metadata(
                stage=self.stage.name,
                category=category,
                error=message,
                retry_count=retry_count if retry_count is not None else record.retry_count,
            ),
        )
        return written

    def _store_failure_event(self, record: ContentRecord, message: str, **metadata: Any) -> None:
        self.events.error(
            f"{self.stage.event_prefix}_failed",
            message,
            content_block_id=record.id,
            metadata=record.event_metadata(stage=self.stage.name, category="store", error=message, **metadata),
        )

    def fail_exhausted(self, record: ContentRecord, outcome: RetryOutcome[Any], **extra: Any) -> bool:
        retry_count = self.max_attempts if outcome.exhausted else outcome.attempts
        return self.fail(
            record,
            outcome.error or "unknown error",
            category="capability",
            retry_count=retry_count,
            extra_parameters=extra or None,
        )

