from __future__ import annotations

import time
from typing import Callable, Optional


class SessionClock:
    """Elapsed-time source for a single session.

    Reads a monotonic time function, so wall-clock adjustments do not affect
    it. Tests pass their own ``now`` callable to get deterministic readings.
    """

    def __init__(self, now: Callable[[], float] = time.monotonic) -> None:
        self._now = now
        self._start: Optional[float] = None
        self._last = 0.0

    @property
    def started(self) -> bool:
        return self._start is not None

    def start(self) -> None:
        """Record the session start instant."""
        self._start = self._now()
        self._last = 0.0

    def elapsed(self) -> float:
        """Seconds since ``start()``; 0.0 before the clock is started."""
        if self._start is None:
            return 0.0
        # never report less than a previous reading
        self._last = max(self._last, self._now() - self._start, 0.0)
        return self._last

    def remaining(self, duration_budget: float) -> float:
        return max(0.0, duration_budget - self.elapsed())

    def is_expired(self, duration_budget: float) -> bool:
        return self.remaining(duration_budget) == 0.0
