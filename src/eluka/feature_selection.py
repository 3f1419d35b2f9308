"""Feature selection through LibSVM's ``fselect.py`` tool.

The script reads a sparse training file and, in its working directory,
writes ``<name>.select`` holding the chosen feature IDs as a bracketed,
comma-separated list, e.g. ``[3, 1, 7]``, best first. It also leaves
``<name>.fscore`` and ``<name>.tr.out`` behind, which are removed here.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Optional

from .backend import run_command
from .errors import FeatureSelectionError

logger = logging.getLogger(__name__)

_SCRATCH_SUFFIXES = (".select", ".fscore", ".tr.out")


def parse_selected_ids(text: str) -> list[int]:
    """Parse ``"[3, 1, 7]"`` into ``[3, 1, 7]``.

    Raises:
        FeatureSelectionError: If the text is not a bracketed ID list.
    """
    body = text.strip()
    if not (body.startswith("[") and body.endswith("]")):
        raise FeatureSelectionError(f"Expected a bracketed ID list, got {body[:40]!r}")
    body = body[1:-1].strip()
    if not body:
        return []
    try:
        return [int(token) for token in body.split(",")]
    except ValueError:
        raise FeatureSelectionError(f"Malformed feature ID list: {text.strip()[:80]!r}") from None


class FeatureSelector:
    """Runs the feature-selection script on a training file.

    Args:
        command: Script command line (split with ``shlex``).
        timeout: Seconds to wait; None waits indefinitely.
    """

    def __init__(self, command: str = "python fselect.py", timeout: Optional[float] = None) -> None:
        self.command = command
        self.timeout = timeout

    def select(self, train_path: Path) -> list[int]:
        """Return the selected feature IDs for ``train_path``, best first."""
        train_path = Path(train_path).resolve()
        workdir = train_path.parent
        select_path = workdir / f"{train_path.name}.select"

        argv = [*shlex.split(self.command), str(train_path)]
        try:
            run_command(argv, FeatureSelectionError, [train_path], timeout=self.timeout, cwd=workdir)
            try:
                text = select_path.read_text(encoding="utf-8")
            except OSError as e:
                raise FeatureSelectionError(
                    f"Feature selection wrote no results: {e}",
                    command=argv,
                    paths=[select_path],
                ) from e
            ids = parse_selected_ids(text)
        finally:
            self._cleanup(workdir, train_path.name)

        logger.debug("Feature selection kept %d feature(s)", len(ids))
        return ids

    @staticmethod
    def _cleanup(workdir: Path, name: str) -> None:
        for suffix in _SCRATCH_SUFFIXES:
            (workdir / f"{name}{suffix}").unlink(missing_ok=True)
