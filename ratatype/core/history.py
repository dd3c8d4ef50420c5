from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

HISTORY_FILENAME = ".ratatype_history.csv"

CSV_COLUMNS = [
    "timestamp",
    "duration_seconds",
    "elapsed_seconds",
    "final_wpm",
    "avg_wpm",
    "peak_wpm",
    "accuracy",
    "characters_typed",
    "errors",
    "correction_mode",
    "mode",
    "text_source",
    "max_word_length",
]


@dataclass(frozen=True)
class HistoryRecord:
    """Summary of a finished session, handed to whatever persists results.

    ``accuracy`` is a fraction in [0, 1]; the CSV file stores it as a
    percentage.
    """

    timestamp: int
    configured_duration: int
    elapsed_duration: float
    final_wpm: float
    average_wpm: float
    peak_wpm: float
    accuracy: float
    characters_typed: int
    wrong_attempt_count: int
    correction_required: bool
    mode: str
    text_source: str
    max_word_length: int

    def to_row(self) -> List[str]:
        return [
            str(self.timestamp),
            str(self.configured_duration),
            f"{self.elapsed_duration:.2f}",
            f"{self.final_wpm:.2f}",
            f"{self.average_wpm:.2f}",
            f"{self.peak_wpm:.2f}",
            f"{self.accuracy * 100.0:.2f}",
            str(self.characters_typed),
            str(self.wrong_attempt_count),
            "true" if self.correction_required else "false",
            self.mode,
            self.text_source,
            str(self.max_word_length),
        ]

    @classmethod
    def from_row(cls, row: dict) -> "HistoryRecord":
        return cls(
            timestamp=int(row["timestamp"]),
            configured_duration=int(row["duration_seconds"]),
            elapsed_duration=float(row["elapsed_seconds"]),
            final_wpm=float(row["final_wpm"]),
            average_wpm=float(row["avg_wpm"]),
            peak_wpm=float(row["peak_wpm"]),
            accuracy=float(row["accuracy"]) / 100.0,
            characters_typed=int(row["characters_typed"]),
            wrong_attempt_count=int(row["errors"]),
            correction_required=row["correction_mode"].strip().lower() == "true",
            mode=row["mode"],
            text_source=row["text_source"],
            max_word_length=int(row["max_word_length"]),
        )


def default_history_path() -> Path:
    return Path.home() / HISTORY_FILENAME


class HistoryStore:
    """Append-only CSV log of finished sessions. File: ~/.ratatype_history.csv.

    Saving results is best effort: a failed write is logged and reported
    through the return value so the session summary can still be shown.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._file_path = Path(path) if path is not None else default_history_path()

    @property
    def path(self) -> Path:
        return self._file_path

    def append(self, record: HistoryRecord) -> bool:
        try:
            write_header = not self._file_path.exists() or self._file_path.stat().st_size == 0
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_path.open("a", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle)
                if write_header:
                    writer.writerow(CSV_COLUMNS)
                writer.writerow(record.to_row())
        except OSError as e:
            logger.warning("Could not save history to %s: %s", self._file_path, e)
            return False
        logger.debug("Appended session result to %s", self._file_path)
        return True

    def load(self) -> List[HistoryRecord]:
        """Read all well-formed records; malformed rows are skipped with a warning."""
        if not self._file_path.exists():
            return []
        try:
            with self._file_path.open("r", encoding="utf-8", newline="") as handle:
                rows = list(csv.DictReader(handle))
        except OSError as e:
            logger.warning("Could not load history from %s: %s", self._file_path, e)
            return []

        records: List[HistoryRecord] = []
        for line_no, row in enumerate(rows, start=2):
            try:
                records.append(HistoryRecord.from_row(row))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed history row %d in %s: %s", line_no, self._file_path, e)
        return records
