"""Speed and accuracy metrics for a typing session.

WPM follows the usual convention of five characters per word and counts
only correctly typed characters::

    wpm = (correct_chars / 5) / (elapsed_seconds / 60)

Accuracy is correct characters over every keystroke that wrote a character
state, so a mistake that was later fixed still costs accuracy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

CHARS_PER_WORD = 5.0
WARMUP_SECONDS = 2.0
MAX_WPM = 500.0
GRAPH_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class TimingSample:
    """Cumulative correct characters at a point in the session."""

    elapsed: float
    correct_chars: int


def compute_wpm(elapsed_seconds: float, correct_char_count: int) -> float:
    if elapsed_seconds <= 0:
        return 0.0
    return (correct_char_count / CHARS_PER_WORD) / (elapsed_seconds / 60.0)


def compute_accuracy(correct_char_count: int, wrong_attempt_count: int, total_typed_attempts: int) -> float:
    """Fraction of attempts that ended up correct; 1.0 before any typing."""
    if total_typed_attempts <= 0:
        return 1.0
    return max(0.0, min(1.0, correct_char_count / total_typed_attempts))


class MetricsTracker:
    """Append-only time series of correct-character counts."""

    def __init__(self) -> None:
        self._samples: List[TimingSample] = []

    def __len__(self) -> int:
        return len(self._samples)

    def record_sample(self, clock_elapsed: float, correct_char_count: int) -> bool:
        """Append a sample unless one was already taken at this time or later."""
        if self._samples and clock_elapsed <= self._samples[-1].elapsed:
            return False
        self._samples.append(TimingSample(max(0.0, clock_elapsed), correct_char_count))
        return True

    def series(self) -> Tuple[TimingSample, ...]:
        return tuple(self._samples)

    current_wpm = staticmethod(compute_wpm)
    accuracy = staticmethod(compute_accuracy)

    def wpm_series(
        self,
        warmup: float = WARMUP_SECONDS,
        interval: float = GRAPH_INTERVAL_SECONDS,
    ) -> List[Tuple[float, float]]:
        """``(elapsed, wpm)`` graph points, at most one per ``interval`` seconds.

        Samples from the first ``warmup`` seconds are left out because a few
        early keystrokes produce huge spikes; values are capped at ``MAX_WPM``.
        """
        points: List[Tuple[float, float]] = []
        last: Optional[float] = None
        for s in self._samples:
            if s.elapsed < warmup:
                continue
            if last is not None and s.elapsed - last < interval:
                continue
            points.append((s.elapsed, min(compute_wpm(s.elapsed, s.correct_chars), MAX_WPM)))
            last = s.elapsed
        return points

    def average_wpm(self) -> float:
        points = self.wpm_series()
        if not points:
            return 0.0
        return sum(wpm for _, wpm in points) / len(points)

    def peak_wpm(self) -> float:
        return max((wpm for _, wpm in self.wpm_series()), default=0.0)


@dataclass
class KeyMetrics:
    times: List[float] = field(default_factory=list)
    errors: int = 0

    @property
    def attempts(self) -> int:
        return len(self.times)

    def average_time(self) -> Optional[float]:
        if not self.times:
            return None
        return sum(self.times) / len(self.times)

    def accuracy(self) -> float:
        if not self.times:
            return 0.0
        return (len(self.times) - self.errors) / len(self.times)


class KeyStats:
    """Per-character response times and error counts.

    The response time of an attempt is measured from the moment the cursor
    arrived on the position to the keystroke made there.
    """

    def __init__(self) -> None:
        self._keys: Dict[str, KeyMetrics] = {}

    def record(self, target_char: str, response_time: float, correct: bool) -> None:
        metrics = self._keys.setdefault(target_char, KeyMetrics())
        metrics.times.append(max(0.0, response_time))
        if not correct:
            metrics.errors += 1

    def get(self, key: str) -> Optional[KeyMetrics]:
        return self._keys.get(key)

    def keys(self) -> List[str]:
        return sorted(self._keys)

    def fastest_keys(self, count: int) -> List[Tuple[str, float]]:
        timed = self._average_times()
        timed.sort(key=lambda item: (item[1], item[0]))
        return timed[:count]

    def slowest_keys(self, count: int) -> List[Tuple[str, float]]:
        timed = self._average_times()
        timed.sort(key=lambda item: (-item[1], item[0]))
        return timed[:count]

    def error_prone_keys(self, count: int) -> List[Tuple[str, int]]:
        errors = [(key, m.errors) for key, m in self._keys.items() if m.errors > 0]
        errors.sort(key=lambda item: (-item[1], item[0]))
        return errors[:count]

    def most_accurate_keys(self, count: int) -> List[Tuple[str, float]]:
        rated = [(key, m.accuracy()) for key, m in self._keys.items() if m.times]
        rated.sort(key=lambda item: (-item[1], item[0]))
        return rated[:count]

    def _average_times(self) -> List[Tuple[str, float]]:
        result = []
        for key, metrics in self._keys.items():
            average = metrics.average_time()
            if average is not None:
                result.append((key, average))
        return result
