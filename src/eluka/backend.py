"""External learning backend: trainer and predictor processes.

The classifier never learns anything itself. It writes sparse text files
and hands them to a LibSVM-compatible pair of executables::

    svm-train   [options] <train_file> <model_file>
    svm-predict <query_file> <model_file> <result_file>

The result file holds one integer prediction per query line.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Type

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import (
    BackendError,
    BackendPredictionError,
    BackendTimeoutError,
    BackendTrainingError,
)
from .vectors import parse_label

logger = logging.getLogger(__name__)


class Backend(ABC):
    """Synchronous trainer/predictor collaborator."""

    @abstractmethod
    def train(self, train_path: Path, model_path: Path) -> str:
        """Train on ``train_path`` and write the artifact to ``model_path``.

        Returns:
            Whatever the trainer reported on stdout.

        Raises:
            BackendTrainingError: If training fails or no artifact appears.
            BackendTimeoutError: If training exceeds the timeout.
        """
        ...

    @abstractmethod
    def predict(self, query_path: Path, model_path: Path, result_path: Path) -> list[int]:
        """Predict every line of ``query_path``.

        Returns:
            One integer label code per query line.

        Raises:
            BackendPredictionError: If prediction fails or the results
                file is missing or malformed.
            BackendTimeoutError: If prediction exceeds the timeout.
        """
        ...


def run_command(
    argv: list[str],
    error_cls: Type[BackendError],
    paths: Sequence[Path] = (),
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
) -> str:
    """Run an external command to completion and return its stdout.

    Raises:
        BackendTimeoutError: If the command exceeds ``timeout``.
        error_cls: If the command cannot be started or exits non-zero.
    """
    logger.debug("Running %s", shlex.join(argv))
    try:
        completed = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise BackendTimeoutError(
            f"{argv[0]} did not finish within {timeout}s",
            command=argv,
            paths=paths,
        ) from e
    except OSError as e:
        raise error_cls(f"Cannot execute {argv[0]}: {e}", command=argv, paths=paths) from e

    output = (completed.stdout or "") + (completed.stderr or "")
    if output.strip():
        logger.debug("%s output:\n%s", argv[0], output.rstrip())
    if completed.returncode != 0:
        raise error_cls(
            f"{argv[0]} failed",
            command=argv,
            returncode=completed.returncode,
            output=output,
            paths=paths,
        )
    return completed.stdout or ""


def read_predictions(result_path: Path) -> list[int]:
    """Parse a results file of one integer prediction per line.

    Raises:
        BackendPredictionError: If the file is missing or a line is not an integer.
    """
    try:
        text = Path(result_path).read_text(encoding="utf-8")
    except OSError as e:
        raise BackendPredictionError(
            f"Cannot read prediction results: {e}", paths=[result_path]
        ) from e

    predictions: list[int] = []
    for line_number, line in enumerate(text.splitlines(), 1):
        token = line.strip()
        if not token:
            continue
        try:
            predictions.append(parse_label(token.split()[0]))
        except ValueError:
            raise BackendPredictionError(
                f"Malformed prediction on line {line_number}: {token!r}",
                paths=[result_path],
            ) from None
    return predictions


class SVMBackend(Backend):
    """Runs LibSVM-style ``svm-train`` / ``svm-predict`` executables.

    Args:
        train_command: Trainer command line (split with ``shlex``).
        predict_command: Predictor command line (split with ``shlex``).
        train_options: Extra trainer arguments placed before the file paths.
        timeout: Seconds to wait for each call; None waits indefinitely.
        max_attempts: Attempts per call. Only timeouts are retried, and
            the default of 1 disables retrying.
    """

    def __init__(
        self,
        train_command: str = "svm-train",
        predict_command: str = "svm-predict",
        train_options: Sequence[str] = (),
        timeout: Optional[float] = None,
        max_attempts: int = 1,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.train_command = train_command
        self.predict_command = predict_command
        self.train_options = list(train_options)
        self.timeout = timeout
        self.max_attempts = max_attempts

    def train(self, train_path: Path, model_path: Path) -> str:
        argv = [
            *shlex.split(self.train_command),
            *self.train_options,
            str(train_path),
            str(model_path),
        ]
        paths = [train_path, model_path]
        output = self._run(argv, BackendTrainingError, paths)
        if not Path(model_path).exists():
            raise BackendTrainingError(
                "Trainer finished but wrote no model artifact",
                command=argv,
                returncode=0,
                output=output,
                paths=paths,
            )
        return output

    def predict(self, query_path: Path, model_path: Path, result_path: Path) -> list[int]:
        result_path = Path(result_path)
        result_path.unlink(missing_ok=True)
        argv = [
            *shlex.split(self.predict_command),
            str(query_path),
            str(model_path),
            str(result_path),
        ]
        self._run(argv, BackendPredictionError, [query_path, model_path, result_path])
        return read_predictions(result_path)

    def _run(self, argv: list[str], error_cls: Type[BackendError], paths: list[Path]) -> str:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type(BackendTimeoutError),
            reraise=True,
        )
        return retrying(self._run_once, argv, error_cls, paths)

    def _run_once(self, argv: list[str], error_cls: Type[BackendError], paths: list[Path]) -> str:
        return run_command(argv, error_cls, paths, timeout=self.timeout)

    def __repr__(self) -> str:
        return (
            f"SVMBackend(train_command={self.train_command!r}, "
            f"predict_command={self.predict_command!r}, timeout={self.timeout})"
        )
