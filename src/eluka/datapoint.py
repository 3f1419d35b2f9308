"""Data points: sparse vectors built from feature maps or free text.

A raw input is one of two variants:

- :class:`FeatureMapInput` -- a mapping of feature name to value. Numeric
  values become a feature named after the field; string values are
  categorical and become a ``"field||value"`` feature with value 1.
- :class:`TextInput` -- free text, split into terms by an
  :class:`~eluka.preprocessing.Analyzer`. Each distinct term becomes a
  feature weighted by term frequency or presence.

Each variant knows how to produce its own raw ``{key: value}`` weights;
:meth:`DataPoint.build` then resolves the keys through a feature space
and stores the result as ID-ascending ``(id, value)`` pairs with zeros
dropped.
"""

from __future__ import annotations

import logging
import math
import numbers
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from .features import FeatureSpace, FrozenFeatureSpace, feature_key
from .models import Weighting
from .preprocessing import Analyzer, StandardAnalyzer

logger = logging.getLogger(__name__)

Number = Union[int, float]
SparsePair = tuple[int, Number]
AnySpace = Union[FeatureSpace, FrozenFeatureSpace]

_DEFAULT_ANALYZER = StandardAnalyzer()


# ---------------------------------------------------------------------------
# Raw inputs
# ---------------------------------------------------------------------------

class Datum(ABC):
    """A raw input that can describe itself as feature weights."""

    @abstractmethod
    def raw_features(
        self,
        analyzer: Analyzer,
        weighting: Weighting = Weighting.TERM_FREQUENCY,
    ) -> dict[str, Number]:
        """Return ``{feature_key: value}`` in first-observed order.

        Must validate everything it needs to, so that a failure here
        leaves the feature space untouched.
        """
        ...


@dataclass(frozen=True)
class TextInput(Datum):
    """Free text to be tokenized by an analyzer."""

    text: str

    def raw_features(
        self,
        analyzer: Analyzer,
        weighting: Weighting = Weighting.TERM_FREQUENCY,
    ) -> dict[str, Number]:
        counts = Counter(analyzer.analyze(self.text))
        if weighting == Weighting.PRESENCE:
            return {term: 1 for term in counts}
        return dict(counts)


@dataclass(frozen=True)
class FeatureMapInput(Datum):
    """A mapping of feature name to numeric or categorical value."""

    features: Mapping[str, Any] = field(hash=False)

    def raw_features(
        self,
        analyzer: Analyzer,
        weighting: Weighting = Weighting.TERM_FREQUENCY,
    ) -> dict[str, Number]:
        weights: dict[str, Number] = {}
        for name, value in self.features.items():
            if value is None:
                continue
            if isinstance(value, str):
                key, weight = feature_key(name, value), 1
            elif isinstance(value, bool):
                key, weight = str(name), int(value)
            elif isinstance(value, numbers.Real):
                if not math.isfinite(value):
                    raise ValueError(f"Feature {name!r} has non-finite value {value!r}")
                key, weight = str(name), value
            else:
                raise ValueError(
                    f"Feature {name!r} has unsupported value type {type(value).__name__}"
                )
            weights[key] = weights.get(key, 0) + weight
        return weights


def as_datum(data: Union[Datum, str, Mapping[str, Any]]) -> Datum:
    """Wrap a plain string or mapping in its input variant."""
    if isinstance(data, Datum):
        return data
    if isinstance(data, str):
        return TextInput(data)
    if isinstance(data, Mapping):
        return FeatureMapInput(dict(data))
    raise TypeError(
        f"Expected text, a feature mapping, or a Datum; got {type(data).__name__}"
    )


# ---------------------------------------------------------------------------
# Sparse vector
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DataPoint:
    """An immutable sparse vector of ``(feature_id, value)`` pairs.

    Pairs are strictly ID-ascending and never hold a zero value. The
    feature space the point was built against is kept for reference but
    does not take part in equality.
    """

    pairs: tuple[SparsePair, ...] = ()
    space: Optional[AnySpace] = field(default=None, compare=False, repr=False)

    @classmethod
    def build(
        cls,
        datum: Datum,
        space: AnySpace,
        analyzer: Optional[Analyzer] = None,
        weighting: Weighting = Weighting.TERM_FREQUENCY,
    ) -> "DataPoint":
        """Encode ``datum`` against ``space``.

        A growable space assigns IDs to new features. A frozen space
        silently drops features it has never seen, since the sparse
        format cannot express an out-of-vocabulary dimension.
        """
        raw = datum.raw_features(analyzer or _DEFAULT_ANALYZER, weighting)

        values: dict[int, Number] = {}
        dropped: list[str] = []
        for key, value in raw.items():
            if value == 0:
                continue
            feature_id = space.resolve(key)
            if feature_id is None:
                dropped.append(key)
                continue
            values[feature_id] = values.get(feature_id, 0) + value

        if dropped:
            logger.debug("Dropped %d unseen feature(s): %s", len(dropped), dropped[:10])

        pairs = tuple(sorted((fid, v) for fid, v in values.items() if v != 0))
        return cls(pairs=pairs, space=space)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[SparsePair],
        space: Optional[AnySpace] = None,
    ) -> "DataPoint":
        """Build a point from explicit pairs, sorting and dropping zeros.

        Raises:
            ValueError: If a feature ID is repeated or not positive.
        """
        values: dict[int, Number] = {}
        for feature_id, value in pairs:
            if feature_id < 1:
                raise ValueError(f"Feature IDs must be positive, got {feature_id}")
            if feature_id in values:
                raise ValueError(f"Duplicate feature ID {feature_id}")
            values[feature_id] = value
        return cls(
            pairs=tuple(sorted((fid, v) for fid, v in values.items() if v != 0)),
            space=space,
        )

    def to_sparse_pairs(
        self,
        feature_subset: Optional[Iterable[int]] = None,
    ) -> list[SparsePair]:
        """The ``(id, value)`` pairs, optionally restricted to ``feature_subset``."""
        if feature_subset is None:
            return list(self.pairs)
        allowed = feature_subset if isinstance(feature_subset, (set, frozenset)) else set(feature_subset)
        return [(fid, v) for fid, v in self.pairs if fid in allowed]

    @property
    def ids(self) -> list[int]:
        return [fid for fid, _ in self.pairs]

    def to_features(self) -> dict[str, Number]:
        """Map the point back to ``{feature_key: value}`` via its space."""
        if self.space is None:
            raise ValueError("DataPoint is not bound to a feature space")
        return {self.space.key_for(fid): v for fid, v in self.pairs}

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[SparsePair]:
        return iter(self.pairs)
