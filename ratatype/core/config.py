from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ratatype.core.errors import SessionConfigError

MIN_WORD_LENGTH = 3
MAX_WORD_LENGTH = 20


class TextMode(Enum):
    """Kind of practice text: prose words or source code lines."""

    NORMAL = "normal"
    CODE = "code"


@dataclass(frozen=True)
class SessionConfig:
    """Settings for one typing session, already parsed by the caller."""

    duration_seconds: int = 30
    require_correction: bool = False
    mode: TextMode = TextMode.NORMAL
    text_source: str = "common"
    max_word_length: int = 7

    def validate(self) -> None:
        if isinstance(self.duration_seconds, bool) or not isinstance(self.duration_seconds, int):
            raise SessionConfigError(f"duration must be an integer, got {self.duration_seconds!r}")
        if self.duration_seconds <= 0:
            raise SessionConfigError(f"duration must be positive, got {self.duration_seconds}")
        if not MIN_WORD_LENGTH <= self.max_word_length <= MAX_WORD_LENGTH:
            raise SessionConfigError(
                f"max word length must be between {MIN_WORD_LENGTH} and {MAX_WORD_LENGTH}, "
                f"got {self.max_word_length}"
            )
