"""Wall-clock deadline tracking for the acquisition loop."""
from __future__ import annotations

import time


class Deadline:
    """Tracks elapsed time against an optional limit.

    A ``limit`` of ``0`` means there is no deadline and ``expired()`` is
    always False.  Uses ``time.monotonic`` so clock adjustments do not move
    the deadline.
    """

    def __init__(self, limit: float) -> None:
        self._limit = limit
        self._start = time.monotonic()

    @property
    def limit(self) -> float:
        return self._limit

    @property
    def enabled(self) -> bool:
        return self._limit > 0

    def elapsed(self) -> float:
        """Seconds since the deadline was started."""
        return time.monotonic() - self._start

    def remaining(self) -> float | None:
        """Seconds left, ``None`` when unlimited, never negative."""
        if not self.enabled:
            return None
        return max(0.0, self._limit - self.elapsed())

    def expired(self) -> bool:
        return self.enabled and self.elapsed() >= self._limit
