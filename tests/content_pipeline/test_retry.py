import pytest

from src.shared.batch.retry import RetryableError, with_retry


class _Flaky:
    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or TimeoutError("timed out")
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


def test_success_after_transient_failures_reports_attempts():
    delays = []
    operation = _Flaky(failures=2)

    outcome = with_retry(operation, 3, sleep=delays.append)

    assert outcome.succeeded
    assert outcome.value == "ok"
    assert outcome.attempts == 3
    assert len(delays) == 2
    assert delays[0] <= delays[1]


def test_gives_up_after_exactly_max_attempts():
    delays = []
    operation = _Flaky(failures=10, error=RetryableError("503 from provider"))

    outcome = with_retry(operation, 3, sleep=delays.append)

    assert not outcome.succeeded
    assert operation.calls == 3
    assert outcome.attempts == 3
    assert outcome.exhausted
    assert outcome.error == "503 from provider"
    assert outcome.error_type == "RetryableError"
    assert len(delays) == 2


def test_non_retryable_error_stops_immediately():
    operation = _Flaky(failures=10, error=ValueError("bad request"))

    outcome = with_retry(operation, 3, sleep=lambda _: None)

    assert operation.calls == 1
    assert outcome.attempts == 1
    assert not outcome.exhausted
    assert outcome.error_type == "ValueError"


def test_backoff_is_capped():
    delays = []

    with_retry(_Flaky(failures=10), 6, base_delay=1.0, max_delay=3.0, sleep=delays.append)

    assert len(delays) == 5
    assert max(delays) <= 3.0


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        with_retry(lambda: "never", 0)
