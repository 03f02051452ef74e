"""Sliding-window admission control for upstream generation calls."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)

MINUTE = 60.0
HOUR = 3600.0


class RateLimiter:
    """Process-wide request ceiling over a one-minute and a one-hour window.

    Throttles total upstream volume, not per-business volume.
    """

    def __init__(
        self,
        max_per_minute: int = 10,
        max_per_hour: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_per_minute = max_per_minute
        self.max_per_hour = max_per_hour
        self._clock = clock
        self._timestamps: deque[float] = deque()

    def can_proceed(self) -> bool:
        """True when both windows are below their ceilings."""
        per_minute, per_hour = self._counts()
        if per_minute >= self.max_per_minute:
            logger.warning("Rate limit: %d requests in the last minute", per_minute)
            return False
        if per_hour >= self.max_per_hour:
            logger.warning("Rate limit: %d requests in the last hour", per_hour)
            return False
        return True

    def record_attempt(self) -> None:
        self._timestamps.append(self._clock())

    def remaining(self) -> dict:
        """Requests left in each window."""
        per_minute, per_hour = self._counts()
        return {
            "per_minute": max(0, self.max_per_minute - per_minute),
            "per_hour": max(0, self.max_per_hour - per_hour),
        }

    def _counts(self) -> tuple[int, int]:
        now = self._clock()
        while self._timestamps and now - self._timestamps[0] >= HOUR:
            self._timestamps.popleft()
        per_minute = sum(1 for ts in self._timestamps if now - ts < MINUTE)
        return per_minute, len(self._timestamps)
