"""Bounded retry with exponential backoff for external capability calls."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 10.0


class RetryableError(RuntimeError):
    """Transient failure of an external call; eligible for another attempt."""


RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    RetryableError,
    TimeoutError,
    ConnectionError,
)


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Typed result of a retried operation.

    Exactly one of ``value`` / ``error`` is meaningful: ``error`` carries the
    message of the last failed attempt when every attempt was used up or a
    non-retryable error stopped the loop; ``exhausted`` tells the two apart.
    """

    value: Optional[T] = None
    error: Optional[str] = None
    attempts: int = 0
    error_type: Optional[str] = None
    exhausted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    *,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operation",
) -> RetryOutcome[T]:
    """Run *operation* up to *max_attempts* times and capture the outcome.

    Delays between attempts start at *base_delay* seconds and double per
    attempt, capped at *max_delay*. Errors outside *retry_on* stop the loop
    after the attempt that raised them. Nothing is raised to the caller.

    Example:
        outcome = with_retry(lambda: client.generate(request), description="script voice_2")
        if outcome.succeeded:
            script = outcome.value
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, max=max_delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )

    attempts = 0
    try:
        for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                value = operation()
    except Exception as exc:  # noqa: BLE001 - converted into a typed failure
        logger.error(
            "%s failed after %d attempt(s): %s",
            description,
            attempts,
            exc,
        )
        return RetryOutcome(
            error=str(exc) or type(exc).__name__,
            attempts=attempts,
            error_type=type(exc).__name__,
            exhausted=isinstance(exc, retry_on) and attempts >= max_attempts,
        )

    if attempts > 1:
        logger.info("%s succeeded on attempt %d/%d", description, attempts, max_attempts)
    return RetryOutcome(value=value, attempts=attempts)
