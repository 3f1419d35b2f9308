"""Shared test fixtures for eluka tests."""

from __future__ import annotations

import shlex
import sys
import textwrap
from pathlib import Path
from typing import Callable, Optional

import pytest

from eluka.backend import Backend
from eluka.config import ModelConfig
from eluka.features import FeatureSpace
from eluka.model import ClassifierModel


class FakeBackend(Backend):
    """In-memory backend that records the files it is handed."""

    def __init__(
        self,
        predictions: Optional[list[int]] = None,
        train_error: Optional[Exception] = None,
        predict_error: Optional[Exception] = None,
    ) -> None:
        self.predictions = predictions or [1]
        self.train_error = train_error
        self.predict_error = predict_error
        self.train_files: list[str] = []
        self.query_files: list[str] = []

    def train(self, train_path: Path, model_path: Path) -> str:
        self.train_files.append(Path(train_path).read_text(encoding="utf-8"))
        if self.train_error is not None:
            raise self.train_error
        Path(model_path).write_text("fake model\n", encoding="utf-8")
        return "optimization finished\n"

    def predict(self, query_path: Path, model_path: Path, result_path: Path) -> list[int]:
        text = Path(query_path).read_text(encoding="utf-8")
        self.query_files.append(text)
        if self.predict_error is not None:
            raise self.predict_error
        n = len(text.splitlines())
        return [self.predictions[i % len(self.predictions)] for i in range(n)]


# ---------------------------------------------------------------------------
# Stand-ins for the external executables
# ---------------------------------------------------------------------------

TRAIN_SCRIPT = """
import shutil
import sys

args = sys.argv[1:]
train, model = args[-2], args[-1]
shutil.copyfile(train, model)
print("optimization finished; options: " + " ".join(args[:-2]))
"""

# Predicts positive exactly when feature 1 is present.
PREDICT_SCRIPT = """
import sys

query, model, result = sys.argv[1:4]
with open(query) as q, open(result, "w") as r:
    for line in q:
        ids = {tok.split(":")[0] for tok in line.split()[1:]}
        r.write("1\\n" if "1" in ids else "-1\\n")
"""

FSELECT_SCRIPT = """
import os
import sys

name = os.path.basename(sys.argv[1])
with open(name + ".select", "w") as f:
    f.write("[2, 1]")
for suffix in (".fscore", ".tr.out"):
    with open(name + suffix, "w") as f:
        f.write("scratch")
print("selected 2 features")
"""

FAIL_SCRIPT = """
import sys

sys.stderr.write("cannot open input file\\n")
sys.exit(2)
"""

NOOP_SCRIPT = """
print("done")
"""

SLOW_SCRIPT = """
import time

time.sleep(10)
"""


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], str]:
    """Write a Python script and return a command line that runs it."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> str:
        path = bin_dir / f"{name}.py"
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return shlex.join([sys.executable, str(path)])

    return _make


@pytest.fixture
def train_command(make_script) -> str:
    return make_script("svm_train", TRAIN_SCRIPT)


@pytest.fixture
def predict_command(make_script) -> str:
    return make_script("svm_predict", PREDICT_SCRIPT)


@pytest.fixture
def fselect_command(make_script) -> str:
    return make_script("fselect", FSELECT_SCRIPT)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def space() -> FeatureSpace:
    return FeatureSpace()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def model(workdir: Path, fake_backend: FakeBackend) -> ClassifierModel:
    """A model wired to the in-memory backend."""
    return ClassifierModel(ModelConfig(directory=workdir), backend=fake_backend)


@pytest.fixture
def script_model(
    workdir: Path,
    train_command: str,
    predict_command: str,
    fselect_command: str,
) -> ClassifierModel:
    """A model wired to the stand-in executables."""
    config = ModelConfig(
        directory=workdir,
        svm_train_path=train_command,
        svm_predict_path=predict_command,
        fselect_path=fselect_command,
        timeout=30,
    )
    return ClassifierModel(config)
