"""Sliding hourly request budget for the Unsplash search API."""

from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

# Unsplash demo applications are allowed 50 requests per hour.
UNSPLASH_HOURLY_LIMIT = 50
ONE_HOUR_SECONDS = 60 * 60


class HourlyRequestWindow:
    """Counts successful requests and blocks once the ceiling is reached.

    The window starts lazily on the first ``acquire()``. Once ``limit`` requests
    have been recorded inside an active window, the next ``acquire()`` sleeps for
    the window's remaining time and then starts a fresh window. The wait is not
    cancellable; ``KeyboardInterrupt`` raised during the sleep propagates.
    """

    def __init__(
        self,
        *,
        limit: int = UNSPLASH_HOURLY_LIMIT,
        window_seconds: float = ONE_HOUR_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = int(limit)
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._sleep = sleep
        self._window_start: float | None = None
        self._count = 0

    @property
    def request_count(self) -> int:
        return self._count

    @property
    def window_start(self) -> float | None:
        return self._window_start

    def acquire(self) -> None:
        """Block until one more request fits inside the current window."""
        now = self._clock()
        if self._window_start is None:
            self._window_start = now
            return

        elapsed = now - self._window_start
        if elapsed >= self.window_seconds:
            logger.debug("[UNSPLASH] rate window expired after %.0fs; resetting", elapsed)
            self._count = 0
            self._window_start = now
            return

        if self._count < self.limit:
            return

        remaining = self.window_seconds - elapsed
        minutes, seconds = divmod(int(remaining), 60)
        logger.warning(
            "\n========================================\n"
            "RATE LIMIT REACHED\n"
            "========================================\n"
            "Unsplash allows %s requests per hour.\n"
            "We've made %s requests in this window.\n"
            "Waiting %s minutes and %s seconds until the window resets...\n"
            "========================================",
            self.limit,
            self._count,
            minutes,
            seconds,
        )
        self._sleep(remaining)
        self.reset()
        logger.info("[UNSPLASH] rate limit window reset; resuming")

    def record(self) -> None:
        """Count one successful request against the current window."""
        if self._window_start is None:
            self._window_start = self._clock()
        self._count += 1

    def reset(self) -> None:
        """Start a fresh window now with a zero counter."""
        self._count = 0
        self._window_start = self._clock()
