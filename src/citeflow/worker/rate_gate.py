"""Process-wide minimum-interval gate for the extraction service.

One ``RateGate`` is created by the entrypoint and shared by every worker of a
pool. It holds a single timestamp of the last completed throttled call.

Two policies are available:

* best-effort (default): the elapsed-time check and the stamp are each done
  under the lock, but the sleep and the throttled call happen outside it.
  Workers that both observe "gap satisfied" before either stamps will both
  proceed, so only the average spacing is bounded under contention.
* strict: a second lock is held across check, sleep, call and stamp, which
  serializes the throttled call across workers and guarantees a hard minimum
  spacing at the cost of throughput.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


class RateGate:
    """Shared "last request time" gate."""

    def __init__(
        self,
        minimum_gap: float,
        *,
        strict: bool = False,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if minimum_gap < 0:
            raise ValueError(f"minimum_gap must be non-negative, got {minimum_gap}")
        self._minimum_gap = minimum_gap
        self._strict = strict
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._call_lock = threading.Lock()
        self._last_request: float | None = None  # None = zero time

    @property
    def minimum_gap(self) -> float:
        return self._minimum_gap

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def last_request(self) -> float | None:
        with self._lock:
            return self._last_request

    def acquire(self, minimum_gap: float | None = None) -> float:
        """Block until ``minimum_gap`` has passed since the last stamp.

        Does not stamp. Returns the number of seconds slept.
        """
        gap = self._minimum_gap if minimum_gap is None else minimum_gap
        with self._lock:
            if self._last_request is None:
                remaining = 0.0
            else:
                remaining = gap - (self._clock() - self._last_request)

        if remaining <= 0:
            return 0.0
        logger.info("Sleeping %.3fs to meet the minimum gap between requests", remaining)
        self._sleep(remaining)
        return remaining

    def stamp(self) -> None:
        """Record now as the time of the last throttled call."""
        with self._lock:
            self._last_request = self._clock()

    @contextmanager
    def throttled(self) -> Iterator[float]:
        """Gate a block: acquire, run it, then stamp on any outcome.

        Yields the seconds slept before entry.
        """
        if self._strict:
            with self._call_lock:
                waited = self.acquire()
                try:
                    yield waited
                finally:
                    self.stamp()
        else:
            waited = self.acquire()
            try:
                yield waited
            finally:
                self.stamp()
