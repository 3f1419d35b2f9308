"""Tests for example file readers."""

from __future__ import annotations

from pathlib import Path

import pytest

from eluka.datapoint import FeatureMapInput, TextInput
from eluka.models import Label
from eluka.parsers import JsonLinesParser, TsvParser, get_parser, read_examples


class TestJsonLines:
    """Tests for JSON Lines example files."""

    def test_text_and_features(self, tmp_path: Path) -> None:
        path = tmp_path / "examples.jsonl"
        path.write_text(
            '{"label": "positive", "text": "cheap pills"}\n'
            "\n"
            "# comment\n"
            '{"label": "negative", "features": {"colour": "red", "size": 3}}\n'
            '{"text": "unlabeled"}\n',
            encoding="utf-8",
        )
        examples = read_examples(path)
        assert [e.label for e in examples] == [Label.POSITIVE, Label.NEGATIVE, None]
        assert examples[0].datum == TextInput("cheap pills")
        assert examples[1].datum == FeatureMapInput({"colour": "red", "size": 3})
        assert examples[1].line_number == 4

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.jsonl"
        path.write_text('{"text": \n', encoding="utf-8")
        with pytest.raises(ValueError, match="line 1"):
            read_examples(path)

    def test_missing_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.jsonl"
        path.write_text('{"label": "positive"}\n', encoding="utf-8")
        with pytest.raises(ValueError, match="'text' string or a 'features' object"):
            read_examples(path)

    def test_invalid_label(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.jsonl"
        path.write_text('{"label": "maybe", "text": "x"}\n', encoding="utf-8")
        with pytest.raises(ValueError, match="maybe"):
            read_examples(path)

    def test_not_an_object(self) -> None:
        with pytest.raises(ValueError):
            JsonLinesParser().parse_line("[1, 2]", 1)


class TestTsv:
    """Tests for tab-separated example files."""

    def test_labeled_and_unlabeled(self, tmp_path: Path) -> None:
        path = tmp_path / "examples.tsv"
        path.write_text("positive\tcheap pills\n:negative\tmeeting notes\njust text\n", encoding="utf-8")
        examples = read_examples(path)
        assert [e.label for e in examples] == [Label.POSITIVE, Label.NEGATIVE, None]
        assert examples[2].datum == TextInput("just text")


class TestGetParser:
    """Tests for parser lookup by extension."""

    def test_jsonl(self) -> None:
        assert isinstance(get_parser(Path("a.jsonl")), JsonLinesParser)

    def test_txt(self) -> None:
        assert isinstance(get_parser(Path("a.TXT")), TsvParser)

    def test_unsupported(self) -> None:
        with pytest.raises(ValueError, match="Supported formats"):
            get_parser(Path("a.csv"))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_examples(tmp_path / "nope.jsonl")
