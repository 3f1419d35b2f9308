"""Tests for shared data models."""

from __future__ import annotations

from pathlib import Path

import pytest

from eluka.errors import InvalidLabelError
from eluka.models import BuildResult, Label, ModelState, Weighting


class TestLabel:
    """Tests for label parsing."""

    @pytest.mark.parametrize("value", ["positive", "POSITIVE", " :positive ", Label.POSITIVE])
    def test_parse_spellings(self, value) -> None:
        assert Label.parse(value) is Label.POSITIVE

    def test_parse_unknown_value(self) -> None:
        with pytest.raises(InvalidLabelError, match="maybe"):
            Label.parse(":maybe")

    def test_invalid_label_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Label.parse("")

    def test_trainable(self) -> None:
        assert Label.POSITIVE.is_trainable
        assert Label.NEGATIVE.is_trainable
        assert not Label.UNKNOWN.is_trainable

    def test_str_enum(self) -> None:
        assert Label.NEGATIVE == "negative"


class TestEnums:
    def test_weighting_values(self) -> None:
        assert Weighting("tf") is Weighting.TERM_FREQUENCY
        assert Weighting("presence") is Weighting.PRESENCE

    def test_model_state_values(self) -> None:
        assert ModelState("trained") is ModelState.TRAINED


class TestBuildResult:
    def test_to_dict(self, tmp_path: Path) -> None:
        result = BuildResult(
            train_path=tmp_path / "train",
            model_path=tmp_path / "model",
            example_count=2,
            feature_count=2,
            output="optimization finished\n",
            label_counts={"positive": 1, "negative": 1},
        )
        data = result.to_dict()
        assert data["train_path"] == str(tmp_path / "train")
        assert data["example_count"] == 2
        assert data["label_counts"] == {"positive": 1, "negative": 1}
        assert "output" not in data
