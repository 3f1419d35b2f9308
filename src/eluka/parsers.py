"""Readers for files of labeled (or unlabeled) examples.

Supported formats:

- JSON Lines (``.jsonl``, ``.json``): one object per line with either a
  ``text`` string or a ``features`` mapping, and an optional ``label``::

      {"label": "positive", "text": "cheap pills online"}
      {"label": "negative", "features": {"colour": "red", "size": 3}}

- Tab-separated (``.tsv``, ``.txt``): ``label<TAB>text`` per line, or
  just ``text`` for unlabeled examples.

Blank lines and lines starting with ``#`` are ignored.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .datapoint import Datum, FeatureMapInput, TextInput
from .models import Label


@dataclass(frozen=True)
class Example:
    """One input and its label, if the file gave one."""

    datum: Datum
    label: Optional[Label] = None
    line_number: int = 0


class ExampleParser(ABC):
    """Base class for example file readers."""

    supported_extensions: tuple[str, ...] = ()

    def can_handle(self, path: Path) -> bool:
        return path.suffix.lower() in self.supported_extensions

    def parse(self, path: Path) -> list[Example]:
        """Read every example in ``path``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If a line is malformed (the message names the line).
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        examples: list[Example] = []
        text = path.read_text(encoding="utf-8")
        for line_number, line in enumerate(text.splitlines(), 1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            try:
                examples.append(self.parse_line(line, line_number))
            except ValueError as e:
                raise ValueError(f"{path.name}, line {line_number}: {e}") from e
        return examples

    @abstractmethod
    def parse_line(self, line: str, line_number: int) -> Example:
        ...


class JsonLinesParser(ExampleParser):
    """Parser for JSON Lines example files."""

    supported_extensions = (".jsonl", ".json", ".ndjson")

    def parse_line(self, line: str, line_number: int) -> Example:
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON ({e.msg})") from e
        if not isinstance(record, dict):
            raise ValueError("expected a JSON object")

        if "text" in record:
            datum: Datum = TextInput(str(record["text"]))
        elif isinstance(record.get("features"), dict):
            datum = FeatureMapInput(record["features"])
        else:
            raise ValueError("expected a 'text' string or a 'features' object")

        label = record.get("label")
        return Example(
            datum=datum,
            label=Label.parse(label) if label is not None else None,
            line_number=line_number,
        )


class TsvParser(ExampleParser):
    """Parser for ``label<TAB>text`` files."""

    supported_extensions = (".tsv", ".txt")

    def parse_line(self, line: str, line_number: int) -> Example:
        if "\t" not in line:
            return Example(datum=TextInput(line.strip()), line_number=line_number)
        label, text = line.split("\t", 1)
        return Example(
            datum=TextInput(text.strip()),
            label=Label.parse(label),
            line_number=line_number,
        )


def get_parser(path: Path) -> ExampleParser:
    """Pick a parser by file extension.

    Raises:
        ValueError: If no parser supports the extension.
    """
    parsers: list[ExampleParser] = [JsonLinesParser(), TsvParser()]
    for parser in parsers:
        if parser.can_handle(path):
            return parser

    supported = sorted({ext for p in parsers for ext in p.supported_extensions})
    raise ValueError(
        f"No parser available for '{path.suffix}'. Supported formats: {', '.join(supported)}"
    )


def read_examples(path: str | Path) -> list[Example]:
    """Read an example file with the parser matching its extension."""
    path = Path(path)
    return get_parser(path).parse(path)
