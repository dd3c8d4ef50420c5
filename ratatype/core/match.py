"""Character-by-character matching of typed input against the target text."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from ratatype.core.config import TextMode
from ratatype.core.text import TargetText

_INDENT_CHARS = frozenset(" \t")


class CharState(Enum):
    UNTYPED = "untyped"
    CORRECT = "correct"
    WRONG = "wrong"
    CORRECTED_CORRECT = "corrected_correct"
    SKIPPED_WHITESPACE = "skipped_whitespace"


COUNTED_STATES = frozenset({CharState.CORRECT, CharState.CORRECTED_CORRECT})


class MatchMode(Enum):
    NORMAL = "normal"
    REQUIRE_CORRECTION = "require_correction"


def _indentation_mask(target: TargetText) -> List[bool]:
    """Mark leading spaces/tabs of every line in code text."""
    mask = [False] * len(target)
    if target.mode is not TextMode.CODE:
        return mask
    at_line_start = True
    for index, ch in enumerate(target):
        if ch == "\n":
            at_line_start = True
        elif at_line_start and ch in _INDENT_CHARS:
            mask[index] = True
        else:
            at_line_start = False
    return mask


class MatchEngine:
    """State machine comparing keystrokes with the target text.

    Every position of the target has exactly one :class:`CharState`. The
    cursor only moves forward on ``on_char`` and back by one on
    ``on_backspace``.

    In ``NORMAL`` mode a mismatch is recorded and the cursor moves on. In
    ``REQUIRE_CORRECTION`` mode a mismatch pins the cursor to the position
    until the right character is typed there, which turns the position into
    ``CORRECTED_CORRECT``.

    For code text, leading indentation of each line is skipped automatically
    and marked ``SKIPPED_WHITESPACE``; line breaks must be typed as ``"\\n"``.

    ``typed_attempts`` and ``wrong_attempts`` count every state-writing
    keystroke and are never decremented, so corrected mistakes still show up
    in accuracy.
    """

    def __init__(self, target: TargetText, mode: MatchMode = MatchMode.NORMAL) -> None:
        self._target = target
        self._mode = mode
        self._states: List[CharState] = [CharState.UNTYPED] * len(target)
        self._had_error: List[bool] = [False] * len(target)
        self._skippable = _indentation_mask(target)
        self._cursor = 0
        self._typed_attempts = 0
        self._wrong_attempts = 0
        self._last_position: Optional[int] = None
        self._skip_indentation()

    @property
    def target(self) -> TargetText:
        return self._target

    @property
    def mode(self) -> MatchMode:
        return self._mode

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def states(self) -> Tuple[CharState, ...]:
        return tuple(self._states)

    @property
    def typed_attempts(self) -> int:
        return self._typed_attempts

    @property
    def wrong_attempts(self) -> int:
        return self._wrong_attempts

    @property
    def last_position(self) -> Optional[int]:
        """Position compared by the most recent attempt."""
        return self._last_position

    def state_at(self, index: int) -> CharState:
        return self._states[index]

    def current_char(self) -> Optional[str]:
        """Target character under the cursor, or None past the end."""
        if self._cursor >= len(self._target):
            return None
        return self._target[self._cursor]

    def correct_count(self) -> int:
        return sum(1 for state in self._states if state in COUNTED_STATES)

    def is_complete(self) -> bool:
        if self._cursor < len(self._target):
            return False
        if self._mode is MatchMode.REQUIRE_CORRECTION:
            return CharState.WRONG not in self._states
        return True

    def on_char(self, c: str) -> bool:
        """Compare ``c`` with the character under the cursor.

        If the cursor sits on indentation that was stepped back onto, any
        key other than that whitespace jumps over the rest of the
        indentation first and is compared at the first visible character.

        Returns True when a state was written (and counted as an attempt).
        """
        if self._cursor >= len(self._target):
            return False
        if self._skippable[self._cursor] and c != self._target[self._cursor]:
            # stepped back onto indentation
            self._skip_indentation()
            if self._cursor >= len(self._target):
                return False
        position = self._cursor
        self._last_position = position
        self._typed_attempts += 1
        if c == self._target[position]:
            if self._had_error[position]:
                self._states[position] = CharState.CORRECTED_CORRECT
            else:
                self._states[position] = CharState.CORRECT
            self._advance()
            return True

        self._states[position] = CharState.WRONG
        self._had_error[position] = True
        self._wrong_attempts += 1
        if self._mode is MatchMode.NORMAL:
            self._advance()
        return True

    def on_backspace(self) -> bool:
        """Move back one position and put it back into play.

        In require-correction mode a pending mistake under the cursor is
        cleared as well. Returns False (no-op) at position 0.
        """
        if self._cursor == 0:
            return False
        if (
            self._cursor < len(self._target)
            and self._states[self._cursor] is CharState.WRONG
        ):
            self._states[self._cursor] = CharState.UNTYPED
        self._cursor -= 1
        self._states[self._cursor] = CharState.UNTYPED
        return True

    def _advance(self) -> None:
        self._cursor += 1
        self._skip_indentation()

    def _skip_indentation(self) -> None:
        while self._cursor < len(self._target) and self._skippable[self._cursor]:
            if self._states[self._cursor] is CharState.UNTYPED:
                self._states[self._cursor] = CharState.SKIPPED_WHITESPACE
            self._cursor += 1
