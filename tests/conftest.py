"""Shared fixtures: a controllable monotonic clock and in-memory text sources."""

from __future__ import annotations

from typing import List

import pytest

from ratatype.core.config import TextMode
from ratatype.core.text import TargetText


class FakeTime:
    """Monotonic time function that only moves when a test advances it."""

    def __init__(self, start: float = 1000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class StaticSource:
    """Text source returning the same words (or lines) every time."""

    def __init__(self, text: str, kind: str = "static") -> None:
        self.kind = kind
        self._text = text
        self.calls: List[TextMode] = []

    def next_segments(self, mode: TextMode, max_word_length: int) -> TargetText:
        self.calls.append(mode)
        if mode is TextMode.CODE:
            return TargetText.from_lines(self._text.split("\n"))
        return TargetText.from_words(self._text.split(" "))


@pytest.fixture()
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture()
def make_source():
    """Factory for :class:`StaticSource` instances."""

    def _make(text: str, kind: str = "static") -> StaticSource:
        return StaticSource(text, kind)

    return _make
