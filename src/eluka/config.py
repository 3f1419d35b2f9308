"""Model configuration, optionally read from the environment.

Settings can come from ``ELUKA_*`` environment variables or a ``.env``
file in the current directory::

    ELUKA_DIRECTORY=/var/lib/eluka/spam
    ELUKA_SVM_TRAIN_PATH=/opt/libsvm/svm-train
    ELUKA_SVM_PREDICT_PATH=/opt/libsvm/svm-predict
    ELUKA_FSELECT_PATH="python /opt/libsvm/tools/fselect.py"
    ELUKA_TRAIN_OPTIONS="-t 0 -c 1"
    ELUKA_BACKEND_TIMEOUT=300
    ELUKA_MAX_ATTEMPTS=1
    ELUKA_WEIGHTING=tf
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .models import Weighting

ENV_PREFIX = "ELUKA_"


@dataclass
class ModelConfig:
    """Settings for a ClassifierModel and its backend.

    Attributes:
        directory: Working directory for the train/query/model/result
            files. None means a private temporary directory.
        svm_train_path: Trainer command line.
        svm_predict_path: Predictor command line.
        fselect_path: Feature-selection command line.
        train_options: Extra arguments passed to the trainer.
        timeout: Seconds allowed per backend call (None: no limit).
        max_attempts: Attempts per backend call; only timeouts are retried.
        weighting: Term weighting for text inputs.
    """

    directory: Optional[Path] = None
    svm_train_path: str = "svm-train"
    svm_predict_path: str = "svm-predict"
    fselect_path: str = "python fselect.py"
    train_options: list[str] = field(default_factory=list)
    timeout: Optional[float] = None
    max_attempts: int = 1
    weighting: Weighting = Weighting.TERM_FREQUENCY

    def __post_init__(self) -> None:
        if self.directory is not None:
            self.directory = Path(self.directory).expanduser()
        if isinstance(self.train_options, str):
            self.train_options = shlex.split(self.train_options)
        self.weighting = Weighting(self.weighting)
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_env(cls, **overrides) -> "ModelConfig":
        """Build a config from ``ELUKA_*`` variables (and ``.env``), then apply overrides."""
        values = cls.env_overrides()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @staticmethod
    def env_overrides() -> dict:
        """Only the settings actually present in the environment."""
        load_dotenv(find_dotenv(usecwd=True))
        values: dict = {}

        directory = os.getenv(f"{ENV_PREFIX}DIRECTORY")
        if directory:
            values["directory"] = Path(directory)
        for name in ("svm_train_path", "svm_predict_path", "fselect_path"):
            value = os.getenv(ENV_PREFIX + name.upper())
            if value:
                values[name] = value

        options = os.getenv(f"{ENV_PREFIX}TRAIN_OPTIONS")
        if options:
            values["train_options"] = shlex.split(options)

        timeout = _env_number("BACKEND_TIMEOUT", float)
        if timeout is not None:
            values["timeout"] = timeout
        attempts = _env_number("MAX_ATTEMPTS", int)
        if attempts is not None:
            values["max_attempts"] = attempts

        weighting = os.getenv(f"{ENV_PREFIX}WEIGHTING")
        if weighting:
            try:
                values["weighting"] = Weighting(weighting.strip().lower())
            except ValueError:
                raise ValueError(
                    f"{ENV_PREFIX}WEIGHTING must be one of "
                    f"{[w.value for w in Weighting]}, got {weighting!r}"
                ) from None

        return values

    def with_overrides(self, **overrides) -> "ModelConfig":
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known and v is not None})

    def to_dict(self) -> dict:
        return {
            "directory": str(self.directory) if self.directory else None,
            "svm_train_path": self.svm_train_path,
            "svm_predict_path": self.svm_predict_path,
            "fselect_path": self.fselect_path,
            "train_options": list(self.train_options),
            "timeout": self.timeout,
            "max_attempts": self.max_attempts,
            "weighting": self.weighting.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ModelConfig":
        return cls(**data)


def _env_number(name: str, cast):
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None
