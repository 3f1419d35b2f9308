"""Data models shared across the classifier front end."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import InvalidLabelError


class Label(str, Enum):
    """Symbolic class labels of a binary classifier."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: "Label | str") -> "Label":
        """Coerce ``value`` into a Label.

        Accepts enum members, their string values, and the ``:positive``
        symbol spelling.

        Raises:
            InvalidLabelError: If the value names no label.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().lstrip(":")
        try:
            return cls(text)
        except ValueError:
            raise InvalidLabelError(f"Unknown label: {value!r}") from None

    @property
    def is_trainable(self) -> bool:
        return self in (Label.POSITIVE, Label.NEGATIVE)


class ModelState(str, Enum):
    """Lifecycle of a ClassifierModel."""

    UNTRAINED = "untrained"
    TRAINED = "trained"


class Weighting(str, Enum):
    """How text terms are weighted in a data point."""

    TERM_FREQUENCY = "tf"
    PRESENCE = "presence"


@dataclass
class BuildResult:
    """Outcome of a training run."""

    train_path: Path
    model_path: Path
    example_count: int
    feature_count: int
    output: str = ""
    label_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "train_path": str(self.train_path),
            "model_path": str(self.model_path),
            "example_count": self.example_count,
            "feature_count": self.feature_count,
            "label_counts": self.label_counts,
        }
