"""Tests for ratatype.core.sources – practice text providers."""

from __future__ import annotations

import random
import textwrap
from pathlib import Path

import pytest

from ratatype.core.config import TextMode
from ratatype.core.errors import SessionConfigError, TextSourceError
from ratatype.core.sources import (
    MIN_TEXT_LENGTH,
    CodeFileSource,
    SampleRepository,
    SampleTextSource,
    SystemDictionarySource,
    WordListSource,
    build_source,
    canonical_source_name,
    filter_words,
)
from ratatype.core.text import SegmentKind


# ---------------------------------------------------------------------------
# SampleRepository
# ---------------------------------------------------------------------------

class TestSampleRepository:
    def test_bundled_data_loads(self):
        repo = SampleRepository()
        assert len(repo.samples) >= 1
        assert len(repo.words) > 100

    def test_words_as_list(self, tmp_path: Path):
        path = tmp_path / "samples.yaml"
        path.write_text("samples:\n  - one two\nwords:\n  - alpha\n  - beta\n", encoding="utf-8")
        repo = SampleRepository(path)
        assert repo.words == ("alpha", "beta")
        assert repo.samples == ("one two",)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            SampleRepository(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "- just a list\n",
            "samples: not-a-list\nwords: a b\n",
            "samples: []\nwords: a b\n",
            "samples:\n  - one\n",
            "samples:\n  - one\nwords: []\n",
        ],
    )
    def test_invalid_content(self, tmp_path: Path, content: str):
        path = tmp_path / "samples.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ValueError):
            SampleRepository(path)


# ---------------------------------------------------------------------------
# Word filtering and aliases
# ---------------------------------------------------------------------------

class TestFilterWords:
    def test_length_bounds(self):
        assert filter_words(["an", "cat", "horse", "elephant"], 5) == ["cat", "horse"]

    def test_rejects_non_lowercase_ascii(self):
        assert filter_words(["Paris", "naïve", "don't", "ok3", "good"], 7) == ["good"]


class TestCanonicalSourceName:
    @pytest.mark.parametrize("name,expected", [("google", "common"), ("DICT", "system"), ("built-in", "builtin")])
    def test_aliases(self, name: str, expected: str):
        assert canonical_source_name(name) == expected

    def test_unknown(self):
        with pytest.raises(SessionConfigError):
            canonical_source_name("wikipedia")


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

class TestWordListSource:
    def test_fills_minimum_length(self):
        source = WordListSource(["cat", "dog", "bird"], rng=random.Random(1))
        target = source.next_segments(TextMode.NORMAL, 7)
        assert len(target) >= MIN_TEXT_LENGTH
        assert all(seg.kind is SegmentKind.WORD for seg in target.segments)
        assert set(target.text.split(" ")) <= {"cat", "dog", "bird"}

    def test_respects_max_word_length(self):
        source = WordListSource(["cat", "elephant"], rng=random.Random(1))
        target = source.next_segments(TextMode.NORMAL, 3)
        assert set(target.text.split(" ")) == {"cat"}

    def test_same_seed_same_text(self):
        a = WordListSource(["cat", "dog", "bird"], rng=random.Random(3)).next_segments(TextMode.NORMAL, 7)
        b = WordListSource(["cat", "dog", "bird"], rng=random.Random(3)).next_segments(TextMode.NORMAL, 7)
        assert a == b

    def test_no_usable_words(self):
        with pytest.raises(TextSourceError):
            WordListSource(["elephant"]).next_segments(TextMode.NORMAL, 3)

    def test_code_mode_rejected(self):
        with pytest.raises(SessionConfigError):
            WordListSource(["cat"]).next_segments(TextMode.CODE, 7)


class TestSampleTextSource:
    def test_fills_minimum_length(self):
        source = SampleTextSource(["Hello there, friend."], rng=random.Random(0))
        target = source.next_segments(TextMode.NORMAL, 7)
        assert len(target) >= MIN_TEXT_LENGTH
        assert target.text.startswith("Hello there, friend. Hello")

    def test_requires_samples(self):
        with pytest.raises(TextSourceError):
            SampleTextSource([])


class TestSystemDictionarySource:
    def test_reads_dictionary(self, tmp_path: Path):
        words = tmp_path / "words"
        words.write_text("apple\nBanana\ncherry\nfig's\n", encoding="utf-8")
        fallback = SampleTextSource(["fallback text"])
        source = SystemDictionarySource(fallback, path=words, rng=random.Random(0))
        target = source.next_segments(TextMode.NORMAL, 7)
        assert set(target.text.split(" ")) <= {"apple", "cherry"}

    def test_missing_dictionary_falls_back(self, tmp_path: Path, caplog: pytest.LogCaptureFixture):
        fallback = SampleTextSource(["fallback text"])
        source = SystemDictionarySource(fallback, path=tmp_path / "missing")
        with caplog.at_level("WARNING"):
            target = source.next_segments(TextMode.NORMAL, 7)
        assert target.text.startswith("fallback text")
        assert "Could not load dictionary" in caplog.text

    def test_empty_dictionary_falls_back(self, tmp_path: Path):
        words = tmp_path / "words"
        words.write_text("A\nBB\n", encoding="utf-8")
        source = SystemDictionarySource(SampleTextSource(["fallback text"]), path=words)
        assert source.next_segments(TextMode.NORMAL, 7).text.startswith("fallback")


class TestCodeFileSource:
    def test_reads_lines(self, tmp_path: Path):
        path = tmp_path / "mod.py"
        path.write_text(
            textwrap.dedent(
                """\
                def add(a, b):

                    return a + b   
                """
            ),
            encoding="utf-8",
        )
        target = CodeFileSource(path).next_segments(TextMode.CODE, 7)
        assert target.text == "def add(a, b):\n    return a + b"
        assert all(seg.kind is SegmentKind.LINE for seg in target.segments)

    def test_window_of_lines(self, tmp_path: Path):
        path = tmp_path / "long.py"
        path.write_text("\n".join(f"x{i} = {i}" for i in range(40)), encoding="utf-8")
        target = CodeFileSource(path, max_lines=5, rng=random.Random(2)).next_segments(TextMode.CODE, 7)
        rows = target.text.split("\n")
        assert len(rows) == 5
        first = int(rows[0].split(" = ")[1])
        assert rows == [f"x{i} = {i}" for i in range(first, first + 5)]

    def test_tabs_expanded(self, tmp_path: Path):
        path = tmp_path / "tabs.py"
        path.write_text("if x:\n\tpass\n", encoding="utf-8")
        target = CodeFileSource(path).next_segments(TextMode.CODE, 7)
        assert target.text == "if x:\n    pass"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(TextSourceError):
            CodeFileSource(tmp_path / "missing.py").next_segments(TextMode.CODE, 7)

    def test_blank_file(self, tmp_path: Path):
        path = tmp_path / "blank.py"
        path.write_text("\n   \n", encoding="utf-8")
        with pytest.raises(TextSourceError):
            CodeFileSource(path).next_segments(TextMode.CODE, 7)

    def test_normal_mode_rejected(self, tmp_path: Path):
        with pytest.raises(SessionConfigError):
            CodeFileSource(tmp_path / "x.py").next_segments(TextMode.NORMAL, 7)


class TestBuildSource:
    def test_common_uses_repository_words(self):
        source = build_source("common", rng=random.Random(0))
        assert source.kind == "common"
        target = source.next_segments(TextMode.NORMAL, 7)
        assert len(target) >= MIN_TEXT_LENGTH

    def test_system_kind(self):
        assert build_source("system").kind == "system"

    def test_code_path_wins(self, tmp_path: Path):
        assert build_source("common", code_path=tmp_path / "a.py").kind == "code"

    def test_unknown(self):
        with pytest.raises(SessionConfigError):
            build_source("nope")
