"""Target text model: ordered word or line segments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from ratatype.core.config import TextMode
from ratatype.core.errors import SessionConfigError


class SegmentKind(Enum):
    WORD = "word"
    LINE = "line"


_SEPARATORS = {TextMode.NORMAL: " ", TextMode.CODE: "\n"}
_KINDS = {TextMode.NORMAL: SegmentKind.WORD, TextMode.CODE: SegmentKind.LINE}


@dataclass(frozen=True)
class Segment:
    """One word (prose practice) or one line (code practice)."""

    kind: SegmentKind
    text: str

    def __post_init__(self) -> None:
        if not self.text:
            raise SessionConfigError("segments must not be empty")


class TargetText:
    """Immutable sequence of segments and the characters they expand to.

    Word segments are joined by single spaces, line segments by newlines.
    Line segments keep their leading whitespace.
    """

    def __init__(self, segments: Iterable[Segment], mode: TextMode = TextMode.NORMAL) -> None:
        self._segments: Tuple[Segment, ...] = tuple(segments)
        self._mode = mode
        expected = _KINDS[mode]
        for segment in self._segments:
            if segment.kind is not expected:
                raise SessionConfigError(
                    f"{mode.value} mode expects {expected.value} segments, got {segment.kind.value}"
                )
        self._text = _SEPARATORS[mode].join(segment.text for segment in self._segments)

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "TargetText":
        return cls((Segment(SegmentKind.WORD, w) for w in words if w), TextMode.NORMAL)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "TargetText":
        return cls((Segment(SegmentKind.LINE, line) for line in lines if line), TextMode.CODE)

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return self._segments

    @property
    def mode(self) -> TextMode:
        return self._mode

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __getitem__(self, index: int) -> str:
        return self._text[index]

    def __iter__(self):
        return iter(self._text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetText):
            return NotImplemented
        return self._mode is other._mode and self._segments == other._segments

    def __hash__(self) -> int:
        return hash((self._mode, self._segments))

    def __repr__(self) -> str:
        return f"TargetText(mode={self._mode.value}, segments={len(self._segments)}, chars={len(self._text)})"
