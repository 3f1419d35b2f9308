"""Collections of data points and the sparse text format.

Each serialized line describes one example::

    <label> <id_1>:<value_1> <id_2>:<value_2> ...

IDs are strictly ascending, only nonzero values are written, and the
label is an integer code. Unlabeled (query) entries are written with the
placeholder label 0, which the predictor ignores.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .datapoint import DataPoint, Number
from .errors import NotFoundError, SparseFormatError
from .features import FeatureSpace, FrozenFeatureSpace

UNLABELED_CODE = 0


def format_value(value: Number) -> str:
    """Render a feature value; integral values are written without a decimal point."""
    if isinstance(value, int):
        return str(value)
    as_float = float(value)
    if as_float.is_integer():
        return str(int(as_float))
    return repr(as_float)


def parse_value(token: str) -> Number:
    """Inverse of :func:`format_value`."""
    try:
        return int(token)
    except ValueError:
        return float(token)


def parse_label(token: str) -> int:
    """Parse an integer label code, accepting ``+1`` and ``1.0`` spellings."""
    try:
        return int(token)
    except ValueError:
        value = float(token)
        if not value.is_integer():
            raise ValueError(f"Label {token!r} is not an integer")
        return int(value)


@dataclass(frozen=True)
class LabeledPoint:
    """A data point and its label code (None when unlabeled)."""

    point: DataPoint
    label: Optional[int] = None

    @property
    def label_code(self) -> int:
        return UNLABELED_CODE if self.label is None else self.label


class VectorCollection:
    """Ordered data points that share one feature space.

    Example::

        space = FeatureSpace()
        train = VectorCollection(space)
        train.add(DataPoint.build(FeatureMapInput({"word||cat": 1}), space), 1)
        train.serialize()  # "1 1:1\\n"

    Args:
        space: The growable feature space every member point was built
            against. Points built against a frozen view of it are accepted.
    """

    def __init__(self, space: FeatureSpace) -> None:
        self._space = space.root
        self._entries: list[LabeledPoint] = []

    @property
    def feature_space(self) -> FeatureSpace:
        return self._space

    def add(self, point: DataPoint, label: Optional[int] = None) -> None:
        """Append ``point`` with an integer label code, or unlabeled.

        Raises:
            ValueError: If the point was built against another feature space.
        """
        if point.space is not None and point.space.root is not self._space:
            raise ValueError("DataPoint was built against a different feature space")
        self._entries.append(LabeledPoint(point, label))

    def serialize(self, feature_subset: Optional[Iterable[int]] = None) -> str:
        """Render every entry in insertion order, one line each."""
        subset = None if feature_subset is None else frozenset(feature_subset)
        lines = [self._format_entry(entry, subset) for entry in self._entries]
        return "".join(line + "\n" for line in lines)

    def write(
        self,
        path: Union[str, Path],
        feature_subset: Optional[Iterable[int]] = None,
    ) -> Path:
        """Serialize to ``path`` and return it."""
        path = Path(path)
        path.write_text(self.serialize(feature_subset), encoding="utf-8")
        return path

    @classmethod
    def deserialize(cls, text: str, space: FeatureSpace) -> "VectorCollection":
        """Parse sparse text back into a collection bound to ``space``.

        Blank lines are skipped. Every feature ID must already be known
        to ``space``.

        Raises:
            SparseFormatError: On malformed lines or non-ascending IDs.
            NotFoundError: If a line references an unassigned feature ID.
        """
        collection = cls(space)
        for line_number, line in enumerate(text.splitlines(), 1):
            if not line.strip():
                continue
            label, pairs = _parse_line(line, line_number)
            for feature_id, _ in pairs:
                try:
                    space.key_for(feature_id)
                except NotFoundError:
                    raise NotFoundError(
                        f"line {line_number}: feature ID {feature_id} is not in the feature space"
                    ) from None
            collection.add(DataPoint.from_pairs(pairs, space=collection.feature_space), label)
        return collection

    @classmethod
    def read(cls, path: Union[str, Path], space: FeatureSpace) -> "VectorCollection":
        return cls.deserialize(Path(path).read_text(encoding="utf-8"), space)

    def labels(self) -> list[Optional[int]]:
        return [entry.label for entry in self._entries]

    def points(self) -> list[DataPoint]:
        return [entry.point for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    @staticmethod
    def _format_entry(entry: LabeledPoint, subset: Optional[frozenset[int]]) -> str:
        parts = [str(entry.label_code)]
        parts.extend(
            f"{fid}:{format_value(value)}"
            for fid, value in entry.point.to_sparse_pairs(subset)
        )
        return " ".join(parts)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LabeledPoint]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> LabeledPoint:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"VectorCollection(entries={len(self)}, features={len(self._space)})"


def _parse_line(line: str, line_number: int) -> tuple[int, list[tuple[int, Number]]]:
    tokens = line.split()
    try:
        label = parse_label(tokens[0])
    except ValueError:
        raise SparseFormatError(f"invalid label {tokens[0]!r}", line_number) from None

    pairs: list[tuple[int, Number]] = []
    previous = 0
    for token in tokens[1:]:
        id_text, sep, value_text = token.partition(":")
        if not sep:
            raise SparseFormatError(f"expected <id>:<value>, got {token!r}", line_number)
        try:
            feature_id = int(id_text)
            value = parse_value(value_text)
        except ValueError:
            raise SparseFormatError(f"invalid pair {token!r}", line_number) from None
        if not math.isfinite(value):
            raise SparseFormatError(f"non-finite value in {token!r}", line_number)
        if feature_id <= previous:
            raise SparseFormatError(
                f"feature IDs must be positive and strictly ascending ({feature_id} after {previous})",
                line_number,
            )
        previous = feature_id
        pairs.append((feature_id, value))
    return label, pairs
