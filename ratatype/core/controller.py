from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple, Union

from ratatype.core.clock import SessionClock
from ratatype.core.config import SessionConfig, TextMode
from ratatype.core.errors import SessionConfigError, SessionStateError
from ratatype.core.history import HistoryRecord
from ratatype.core.match import CharState, MatchEngine, MatchMode
from ratatype.core.metrics import KeyStats, MetricsTracker, compute_accuracy, compute_wpm
from ratatype.core.sources import TextSource


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class Key(Enum):
    """Logical non-character keys delivered by the input layer."""

    ENTER = "enter"
    BACKSPACE = "backspace"


Keystroke = Union[str, Key]


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for the rendering layer."""

    state: SessionState
    text: str
    cursor: int
    char_states: Tuple[CharState, ...]
    elapsed: float
    remaining: float
    wpm: float
    accuracy: float
    correct_chars: int
    typed_attempts: int
    wrong_attempts: int


class SessionController:
    """Runs one typing session at a time: idle -> running -> finished.

    The controller is driven by an external event loop that delivers
    keystrokes and periodic ticks one at a time. It never blocks and never
    reads the clock outside of an event, so the snapshot only changes when
    an event is processed.

    ``now`` is the monotonic time function handed to each session clock;
    ``wall_clock`` stamps the history record. ``on_finished`` receives the
    :class:`HistoryRecord` when a session ends.
    """

    def __init__(
        self,
        source: TextSource,
        config: Optional[SessionConfig] = None,
        now: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        on_finished: Optional[Callable[[HistoryRecord], None]] = None,
    ) -> None:
        self._source = source
        self._config = config or SessionConfig()
        self._now = now
        self._wall_clock = wall_clock
        self._on_finished = on_finished
        self._state = SessionState.IDLE
        self._clear()

    def _clear(self) -> None:
        self._engine: Optional[MatchEngine] = None
        self._metrics: Optional[MetricsTracker] = None
        self._key_stats: Optional[KeyStats] = None
        self._clock: Optional[SessionClock] = None
        self._record: Optional[HistoryRecord] = None
        self._elapsed = 0.0
        self._key_started = 0.0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def engine(self) -> Optional[MatchEngine]:
        return self._engine

    @property
    def metrics(self) -> Optional[MetricsTracker]:
        return self._metrics

    @property
    def key_stats(self) -> Optional[KeyStats]:
        return self._key_stats

    @property
    def record(self) -> Optional[HistoryRecord]:
        """History record of the last finished session, if any."""
        return self._record

    def start(self) -> SessionSnapshot:
        """Pull fresh text from the source and start the clock."""
        if self._state is not SessionState.IDLE:
            raise SessionStateError(f"cannot start a session while {self._state.value}")
        config = self._config
        config.validate()
        target = self._source.next_segments(config.mode, config.max_word_length)
        if len(target) == 0:
            raise SessionConfigError("practice text is empty")
        if target.mode is not config.mode:
            raise SessionConfigError(
                f"text source produced {target.mode.value} text for a {config.mode.value} session"
            )

        mode = MatchMode.REQUIRE_CORRECTION if config.require_correction else MatchMode.NORMAL
        self._engine = MatchEngine(target, mode)
        self._metrics = MetricsTracker()
        self._key_stats = KeyStats()
        self._clock = SessionClock(self._now)
        self._clock.start()
        self._elapsed = 0.0
        self._key_started = 0.0
        self._record = None
        self._metrics.record_sample(0.0, 0)
        self._state = SessionState.RUNNING
        if self._engine.is_complete():
            self._finish()
        return self.snapshot()

    def on_keystroke(self, key: Keystroke) -> SessionSnapshot:
        """Feed one keystroke: a single character, ``Key.ENTER`` or ``Key.BACKSPACE``.

        A keystroke that arrives after the time budget ran out ends the
        session and is not applied.
        """
        if self._state is not SessionState.RUNNING:
            raise SessionStateError(f"keystroke delivered while {self._state.value}")
        if key == "\n":
            key = Key.ENTER
        if not isinstance(key, Key) and not (isinstance(key, str) and len(key) == 1):
            raise ValueError(f"keystroke must be a single character or a Key, got {key!r}")

        if self._read_clock():
            self._finish()
            return self.snapshot()

        engine = self._engine
        if key is Key.BACKSPACE:
            if engine.on_backspace():
                self._key_started = self._elapsed
        elif key is Key.ENTER:
            # line breaks only exist in code text
            if self._config.mode is TextMode.CODE:
                self._type("\n")
        else:
            self._type(key)

        self._metrics.record_sample(self._elapsed, engine.correct_count())
        if engine.is_complete():
            self._finish()
        return self.snapshot()

    def tick(self) -> SessionSnapshot:
        """Periodic timer event: sample progress and detect expiry.

        Ticks after the session finished only return the summary snapshot.
        """
        if self._state is SessionState.IDLE:
            raise SessionStateError("tick delivered before start")
        if self._state is SessionState.RUNNING:
            expired = self._read_clock()
            self._metrics.record_sample(self._elapsed, self._engine.correct_count())
            if expired:
                self._finish()
        return self.snapshot()

    def reset(self) -> None:
        """Drop the current session and go back to idle."""
        self._state = SessionState.IDLE
        self._clear()

    def restart(self) -> SessionSnapshot:
        self.reset()
        return self.start()

    def snapshot(self) -> SessionSnapshot:
        duration = float(self._config.duration_seconds)
        engine = self._engine
        if engine is None:
            return SessionSnapshot(
                state=self._state,
                text="",
                cursor=0,
                char_states=(),
                elapsed=0.0,
                remaining=duration,
                wpm=0.0,
                accuracy=1.0,
                correct_chars=0,
                typed_attempts=0,
                wrong_attempts=0,
            )
        correct = engine.correct_count()
        return SessionSnapshot(
            state=self._state,
            text=engine.target.text,
            cursor=engine.cursor,
            char_states=engine.states,
            elapsed=self._elapsed,
            remaining=max(0.0, duration - self._elapsed),
            wpm=compute_wpm(self._elapsed, correct),
            accuracy=compute_accuracy(correct, engine.wrong_attempts, engine.typed_attempts),
            correct_chars=correct,
            typed_attempts=engine.typed_attempts,
            wrong_attempts=engine.wrong_attempts,
        )

    def _read_clock(self) -> bool:
        """Update the event time, capped at the budget; True once expired."""
        budget = self._config.duration_seconds
        expired = self._clock.is_expired(budget)
        self._elapsed = float(budget) if expired else min(self._clock.elapsed(), float(budget))
        return expired

    def _type(self, c: str) -> None:
        engine = self._engine
        cursor_before = engine.cursor
        if not engine.on_char(c):
            return
        target_char = engine.target[engine.last_position]
        self._key_stats.record(target_char, self._elapsed - self._key_started, c == target_char)
        if engine.cursor != cursor_before:
            self._key_started = self._elapsed

    def _finish(self) -> None:
        engine = self._engine
        metrics = self._metrics
        correct = engine.correct_count()
        metrics.record_sample(self._elapsed, correct)
        self._state = SessionState.FINISHED
        self._record = HistoryRecord(
            timestamp=int(self._wall_clock()),
            configured_duration=self._config.duration_seconds,
            elapsed_duration=self._elapsed,
            final_wpm=compute_wpm(self._elapsed, correct),
            average_wpm=metrics.average_wpm(),
            peak_wpm=metrics.peak_wpm(),
            accuracy=compute_accuracy(correct, engine.wrong_attempts, engine.typed_attempts),
            characters_typed=correct,
            wrong_attempt_count=engine.wrong_attempts,
            correction_required=self._config.require_correction,
            mode=self._config.mode.value,
            text_source=getattr(self._source, "kind", self._config.text_source),
            max_word_length=self._config.max_word_length,
        )
        if self._on_finished is not None:
            self._on_finished(self._record)
