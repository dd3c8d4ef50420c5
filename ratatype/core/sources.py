"""Practice text sources.

Every source produces a :class:`TargetText` through ``next_segments``; the
session controller depends only on that method and the ``kind`` label.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

import yaml

from ratatype.core.config import MIN_WORD_LENGTH, TextMode
from ratatype.core.errors import SessionConfigError, TextSourceError
from ratatype.core.text import TargetText

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 500
DICT_PATH = Path("/usr/share/dict/words")
DEFAULT_CODE_LINES = 12

SOURCE_ALIASES = {
    "common": "common",
    "google": "common",
    "google10k": "common",
    "top10k": "common",
    "system": "system",
    "dict": "system",
    "dictionary": "system",
    "builtin": "builtin",
    "built-in": "builtin",
    "samples": "builtin",
}


class TextSource(Protocol):
    kind: str

    def next_segments(self, mode: TextMode, max_word_length: int) -> TargetText:
        ...


@dataclass(frozen=True)
class SampleData:
    samples: Tuple[str, ...]
    words: Tuple[str, ...]


class SampleRepository:
    """Built-in passages and word list loaded from ``data/samples.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or Path(__file__).resolve().parent.parent / "data" / "samples.yaml"
        self._data = self._load()

    @property
    def samples(self) -> Tuple[str, ...]:
        return self._data.samples

    @property
    def words(self) -> Tuple[str, ...]:
        return self._data.words

    def _load(self) -> SampleData:
        if not self._path.exists():
            raise FileNotFoundError(f"Sample text file not found: {self._path}")
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{self._path.name}: expected YAML with 'samples' and 'words'")

        samples = raw.get("samples")
        if not isinstance(samples, list):
            raise ValueError(f"{self._path.name}: 'samples' must be a list")
        samples = [" ".join(str(item).split()) for item in samples if str(item).strip()]
        if not samples:
            raise ValueError(f"{self._path.name}: 'samples' has no passages")

        words = raw.get("words")
        if isinstance(words, list):
            words = [str(item).strip() for item in words if str(item).strip()]
        elif isinstance(words, str):
            # allow words as one whitespace-separated block
            words = words.split()
        else:
            raise ValueError(f"{self._path.name}: missing 'words'")
        if not words:
            raise ValueError(f"{self._path.name}: 'words' is empty")
        return SampleData(samples=tuple(samples), words=tuple(words))


def filter_words(words: Sequence[str], max_word_length: int) -> List[str]:
    """Keep lowercase ASCII words of a practical length."""
    result = []
    for word in words:
        word = word.strip()
        if MIN_WORD_LENGTH <= len(word) <= max_word_length and word.isascii() and word.isalpha() and word.islower():
            result.append(word)
    return result


def _require_normal(kind: str, mode: TextMode) -> None:
    if mode is not TextMode.NORMAL:
        raise SessionConfigError(f"text source '{kind}' only supports normal mode")


def _fill_words(pool: Sequence[str], rng: random.Random) -> List[str]:
    chosen: List[str] = []
    length = 0
    while length < MIN_TEXT_LENGTH:
        word = pool[rng.randrange(len(pool))]
        length += len(word) + (1 if chosen else 0)
        chosen.append(word)
    return chosen


class WordListSource:
    """Random words drawn from a fixed list."""

    def __init__(self, words: Sequence[str], kind: str = "common", rng: Optional[random.Random] = None) -> None:
        self.kind = kind
        self._words = list(words)
        self._rng = rng or random.Random()

    def next_segments(self, mode: TextMode, max_word_length: int) -> TargetText:
        _require_normal(self.kind, mode)
        pool = filter_words(self._words, max_word_length)
        if not pool:
            raise TextSourceError(
                f"no words between {MIN_WORD_LENGTH} and {max_word_length} letters in '{self.kind}' list"
            )
        return TargetText.from_words(_fill_words(pool, self._rng))


class SampleTextSource:
    """Built-in passages, repeated at random until the text is long enough."""

    kind = "builtin"

    def __init__(self, samples: Sequence[str], rng: Optional[random.Random] = None) -> None:
        if not samples:
            raise TextSourceError("no sample passages available")
        self._samples = list(samples)
        self._rng = rng or random.Random()

    def next_segments(self, mode: TextMode, max_word_length: int) -> TargetText:
        _require_normal(self.kind, mode)
        passages: List[str] = []
        length = 0
        while length < MIN_TEXT_LENGTH:
            passage = self._samples[self._rng.randrange(len(self._samples))]
            length += len(passage) + (1 if passages else 0)
            passages.append(passage)
        return TargetText.from_words(" ".join(passages).split())


class SystemDictionarySource:
    """Words from the system dictionary, falling back to built-in passages."""

    kind = "system"

    def __init__(
        self,
        fallback: SampleTextSource,
        path: Path = DICT_PATH,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._path = Path(path)
        self._fallback = fallback
        self._rng = rng or random.Random()

    def next_segments(self, mode: TextMode, max_word_length: int) -> TargetText:
        _require_normal(self.kind, mode)
        try:
            lines = self._path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            logger.warning("Could not load dictionary from %s: %s. Using built-in texts.", self._path, e)
            return self._fallback.next_segments(mode, max_word_length)

        pool = filter_words(lines, max_word_length)
        if not pool:
            logger.warning("Dictionary %s has no usable words. Using built-in texts.", self._path)
            return self._fallback.next_segments(mode, max_word_length)
        return TargetText.from_words(_fill_words(pool, self._rng))


class CodeFileSource:
    """A window of consecutive non-blank lines from a source file."""

    kind = "code"

    def __init__(self, path: Path, max_lines: int = DEFAULT_CODE_LINES, rng: Optional[random.Random] = None) -> None:
        self._path = Path(path)
        self._max_lines = max_lines
        self._rng = rng or random.Random()

    def next_segments(self, mode: TextMode, max_word_length: int) -> TargetText:
        if mode is not TextMode.CODE:
            raise SessionConfigError("code files can only be practised in code mode")
        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TextSourceError(f"could not read code file {self._path}: {e}") from e

        lines = [line.rstrip() for line in raw.expandtabs(4).splitlines()]
        lines = [line for line in lines if line.strip()]
        if not lines:
            raise TextSourceError(f"code file {self._path} has no non-blank lines")
        if len(lines) <= self._max_lines:
            return TargetText.from_lines(lines)
        start = self._rng.randrange(len(lines) - self._max_lines + 1)
        return TargetText.from_lines(lines[start:start + self._max_lines])


def canonical_source_name(name: str) -> str:
    key = name.strip().lower()
    if key not in SOURCE_ALIASES:
        raise SessionConfigError(
            f"Invalid text source '{name}'. Valid options: common, system, builtin"
        )
    return SOURCE_ALIASES[key]


def build_source(
    name: str,
    code_path: Optional[Path] = None,
    repository: Optional[SampleRepository] = None,
    rng: Optional[random.Random] = None,
) -> TextSource:
    """Create the text source selected on the command line."""
    if code_path is not None:
        return CodeFileSource(code_path, rng=rng)
    repository = repository or SampleRepository()
    canonical = canonical_source_name(name)
    samples = SampleTextSource(repository.samples, rng=rng)
    if canonical == "builtin":
        return samples
    if canonical == "system":
        return SystemDictionarySource(samples, rng=rng)
    return WordListSource(repository.words, kind="common", rng=rng)
