"""Best-effort event sink backed by the ``logs`` table."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

LOGS_TABLE = "logs"


class EventStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class EventLogger:
    """Append pipeline events to the store without ever raising.

    A failed insert is reported through the process logger and otherwise
    ignored; event delivery must never change a record's outcome.
    """

    def __init__(self, client: Any, *, table: str = LOGS_TABLE) -> None:
        self.client = client
        self.table = table

    def emit(
        self,
        event_type: str,
        status: EventStatus,
        message: str,
        *,
        content_block_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "event_type": event_type,
            "status": status.value,
            "message": message,
            "metadata": metadata or {},
        }
        if content_block_id:
            payload["content_block_id"] = content_block_id
        try:
            self.client.table(self.table).insert(payload).execute()
        except Exception as exc:  # noqa: BLE001 - event delivery is best-effort
            logger.error("Failed to record %s event: %s", event_type, exc)

    def info(self, event_type: str, message: str, **kwargs: Any) -> None:
        self.emit(event_type, EventStatus.INFO, message, **kwargs)

    def success(self, event_type: str, message: str, **kwargs: Any) -> None:
        self.emit(event_type, EventStatus.SUCCESS, message, **kwargs)

    def warning(self, event_type: str, message: str, **kwargs: Any) -> None:
        self.emit(event_type, EventStatus.WARNING, message, **kwargs)

    def error(self, event_type: str, message: str, **kwargs: Any) -> None:
        self.emit(event_type, EventStatus.ERROR, message, **kwargs)
