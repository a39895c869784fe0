"""Shared batch processing infrastructure.

Provides the bounded retry policy used around every external capability call:
- with_retry: iterative retry with exponential backoff returning a typed outcome
- RetryableError: base class for transient failures eligible for retry

Usage:
    from src.shared.batch import with_retry, RetryableError
"""

from .retry import RETRYABLE_ERRORS, RetryableError, RetryOutcome, with_retry

__all__ = [
    "RETRYABLE_ERRORS",
    "RetryableError",
    "RetryOutcome",
    "with_retry",
]
