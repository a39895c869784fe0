"""Stage one: shape raw source material into record content."""

from __future__ import annotations

from typing import Any, List, Optional

from ..contracts.content_record import ContentRecord
from ..contracts.results import BatchResult
from ..contracts.status import CONTENT_STAGE
from ..db.event_log import EventLogger
from ..db.record_store import SupabaseRecordStore
from ..shaping.content_shaper import TemplateContentShaper
from .base import StageWorker


class ContentWorker(StageWorker):
    """Renders ``pending`` records into ``content_ready`` ones."""

    stage = CONTENT_STAGE

    def __init__(
        self,
        store: SupabaseRecordStore,
        events: EventLogger,
        shaper: Optional[TemplateContentShaper] = None,
        *,
        batch_size: int = 100,
        max_attempts: int = 3,
        **kwargs: Any,
    ) -> None:
        super().__init__(store, events, batch_size=batch_size, max_attempts=max_attempts, **kwargs)
        self.shaper = shaper or TemplateContentShaper()

    def validate(self, record: ContentRecord) -> List[str]:
        return self.shaper.validate(record)

    def process(self, record: ContentRecord, result: BatchResult) -> None:
        outcome = self.retry(lambda: self.shaper.shape(record), description=f"content {record.id}")
        if not outcome.succeeded:
            self.fail_exhausted(record, outcome)
            result.record_failure(f"Content generation failed for {record.id}: {outcome.error}")
            return

        content = outcome.value or ""
        self.complete(
            record,
            {"content": content},
            result,
            metadata={"content_length": len(content)},
        )
