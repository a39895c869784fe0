"""Concurrent generation of every narration variant for a shared record."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Sequence

from src.shared.batch.retry import RetryOutcome

from ..contracts.content_record import FAN_OUT_VOICES, Voice

logger = logging.getLogger(__name__)


class FanOutGenerator:
    """Runs one retried generation per voice and waits for all of them.

    Results are returned in voice order once every task has settled; a task
    that raises is reported as a failed outcome instead of escaping.
    """

    def __init__(self, max_workers: int = len(FAN_OUT_VOICES), voices: Sequence[Voice] = FAN_OUT_VOICES) -> None:
        self._max_workers = max_workers
        self.voices = tuple(voices)

    def generate(self, func: Callable[[Voice], RetryOutcome[str]]) -> Dict[Voice, RetryOutcome[str]]:
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="fan-out") as executor:
            futures = {voice: executor.submit(func, voice) for voice in self.voices}
            wait(list(futures.values()))

        results: Dict[Voice, RetryOutcome[str]] = {}
        for voice, future in futures.items():
            error = future.exception()
            if error is not None:
                logger.error("Variant %s raised outside the retry policy: %s", voice.value, error)
                results[voice] = RetryOutcome(error=str(error), error_type=type(error).__name__)
            else:
                results[voice] = future.result()
        return results
