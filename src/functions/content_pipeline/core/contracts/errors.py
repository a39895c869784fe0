"""Exception types raised inside the content pipeline."""

from __future__ import annotations

from src.shared.batch.retry import RetryableError


class CapabilityError(RetryableError):
    """An external generation call failed in a way worth retrying.

    Covers non-success HTTP status codes and malformed or empty responses.
    """

    def __init__(self, capability: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{capability}: {message}")
        self.capability = capability
        self.status_code = status_code


class CapabilityUnavailableError(RuntimeError):
    """The capability cannot be called at all, e.g. a missing credential."""


class RecordStoreError(RuntimeError):
    """Reading or writing the record store failed."""
