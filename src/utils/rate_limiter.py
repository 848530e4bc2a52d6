"""
Minimum-interval rate limiter for outbound API calls.

One instance per external service; shared safely between worker threads.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Spaces calls at least ``1 / requests_per_second`` seconds apart."""

    def __init__(
        self,
        requests_per_second: float,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            requests_per_second: Maximum sustained request rate. Must be > 0.
            name: Human-readable name for logging.
            clock: Monotonic time source, replaceable in tests.
            sleep: Sleep function, replaceable in tests.
        """
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        self.min_interval = 1.0 / requests_per_second
        self.name = name or f"limiter({requests_per_second}/s)"
        self._clock = clock
        self._sleep = sleep
        self._next_allowed = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """
        Block until the next call is allowed and reserve its slot.

        Returns:
            Seconds waited.
        """
        with self._lock:
            now = self._clock()
            if self._next_allowed is None or now >= self._next_allowed:
                waited = 0.0
                start = now
            else:
                waited = self._next_allowed - now
                logger.debug(f"[{self.name}] waiting {waited:.2f}s")
                self._sleep(waited)
                start = self._next_allowed
            self._next_allowed = start + self.min_interval
            return waited

    def __enter__(self):
        self.wait()
        return self

    def __exit__(self, *args):
        return False
