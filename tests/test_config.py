"""Tests for ModelConfig and environment loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from eluka.config import ModelConfig
from eluka.models import Weighting

ENV_VARS = (
    "ELUKA_DIRECTORY",
    "ELUKA_SVM_TRAIN_PATH",
    "ELUKA_SVM_PREDICT_PATH",
    "ELUKA_FSELECT_PATH",
    "ELUKA_TRAIN_OPTIONS",
    "ELUKA_BACKEND_TIMEOUT",
    "ELUKA_MAX_ATTEMPTS",
    "ELUKA_WEIGHTING",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep load_dotenv() away from any .env in the caller's directory.
    monkeypatch.chdir(tmp_path)


class TestModelConfig:
    """Tests for defaults and validation."""

    def test_defaults(self) -> None:
        config = ModelConfig()
        assert config.directory is None
        assert config.svm_train_path == "svm-train"
        assert config.svm_predict_path == "svm-predict"
        assert config.max_attempts == 1
        assert config.timeout is None
        assert config.weighting == Weighting.TERM_FREQUENCY

    def test_string_coercion(self) -> None:
        config = ModelConfig(directory="work", train_options="-t 0 -c 1", weighting="presence")
        assert config.directory == Path("work")
        assert config.train_options == ["-t", "0", "-c", "1"]
        assert config.weighting == Weighting.PRESENCE

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError):
            ModelConfig(timeout=0)

    def test_invalid_attempts(self) -> None:
        with pytest.raises(ValueError):
            ModelConfig(max_attempts=0)

    def test_dict_round_trip(self) -> None:
        config = ModelConfig(directory="work", train_options=["-c", "2"], timeout=5.0)
        assert ModelConfig.from_dict(config.to_dict()) == config

    def test_with_overrides_skips_none(self) -> None:
        config = ModelConfig(timeout=5.0).with_overrides(timeout=None, max_attempts=2, bogus=1)
        assert config.timeout == 5.0
        assert config.max_attempts == 2


class TestFromEnv:
    """Tests for ELUKA_* environment variables."""

    def test_reads_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELUKA_DIRECTORY", "/srv/eluka")
        monkeypatch.setenv("ELUKA_SVM_TRAIN_PATH", "/opt/libsvm/svm-train")
        monkeypatch.setenv("ELUKA_TRAIN_OPTIONS", "-t 0")
        monkeypatch.setenv("ELUKA_BACKEND_TIMEOUT", "30")
        monkeypatch.setenv("ELUKA_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("ELUKA_WEIGHTING", "presence")

        config = ModelConfig.from_env()
        assert config.directory == Path("/srv/eluka")
        assert config.svm_train_path == "/opt/libsvm/svm-train"
        assert config.svm_predict_path == "svm-predict"
        assert config.train_options == ["-t", "0"]
        assert config.timeout == 30.0
        assert config.max_attempts == 2
        assert config.weighting == Weighting.PRESENCE

    def test_overrides_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELUKA_BACKEND_TIMEOUT", "30")
        assert ModelConfig.from_env(timeout=3.0).timeout == 3.0

    def test_none_overrides_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELUKA_BACKEND_TIMEOUT", "30")
        assert ModelConfig.from_env(timeout=None).timeout == 30.0

    def test_bad_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELUKA_BACKEND_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="ELUKA_BACKEND_TIMEOUT"):
            ModelConfig.from_env()

    def test_bad_weighting(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELUKA_WEIGHTING", "tfidf")
        with pytest.raises(ValueError, match="ELUKA_WEIGHTING"):
            ModelConfig.from_env()

    def test_env_overrides_only_set_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELUKA_SVM_PREDICT_PATH", "predict")
        assert ModelConfig.env_overrides() == {"svm_predict_path": "predict"}

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("ELUKA_FSELECT_PATH=python3 fselect.py\n", encoding="utf-8")
        try:
            assert ModelConfig.from_env().fselect_path == "python3 fselect.py"
        finally:
            os.environ.pop("ELUKA_FSELECT_PATH", None)
