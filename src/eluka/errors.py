"""Exception hierarchy for the Eluka classifier front end.

Encoding-layer errors (labels, lookups, untrained models) are raised
before any state is touched. Backend errors carry the command, exit
status and working file paths so callers can retry ``build`` or
``classify`` themselves.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ElukaError(Exception):
    """Base class for all Eluka errors."""


class InvalidLabelError(ElukaError, ValueError):
    """A training label outside {positive, negative} was supplied."""


class UntrainedModelError(ElukaError, RuntimeError):
    """Classification was requested before the model was built."""


class NotFoundError(ElukaError, KeyError):
    """A key or code is absent from a bijection or feature space."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class DuplicateKeyError(ElukaError, ValueError):
    """A key is already mapped to a different code."""


class DuplicateCodeError(ElukaError, ValueError):
    """A code is already mapped to a different key."""


class SparseFormatError(ElukaError, ValueError):
    """Text that does not follow the sparse ``<label> <id>:<value>`` format."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class BackendError(ElukaError, RuntimeError):
    """An external trainer, predictor or selection script failed.

    Attributes:
        command: The argument vector that was executed.
        returncode: Process exit status, if the process ran to completion.
        output: Captured stdout/stderr of the process.
        paths: Working files involved in the call.
    """

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        output: str = "",
        paths: Sequence[Path] = (),
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.output = output
        self.paths = [Path(p) for p in paths]

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.returncode is not None:
            parts.append(f"exit status {self.returncode}")
        if self.paths:
            parts.append("files: " + ", ".join(str(p) for p in self.paths))
        return "; ".join(parts)


class BackendTrainingError(BackendError):
    """The trainer exited abnormally or produced no model artifact."""


class BackendPredictionError(BackendError):
    """The predictor failed or its results file is missing or malformed."""


class BackendTimeoutError(BackendError):
    """An external call did not finish within the configured timeout."""


class FeatureSelectionError(BackendError):
    """The feature-selection script failed or its output is unreadable."""
