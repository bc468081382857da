"""Append-only log of per-file failures.

Failed trash moves and failed copies never stop a run; they are written
here, one timestamped line each, for later inspection.
"""

from __future__ import annotations

import logging
from pathlib import Path

from tree_mirror.errors import ErrorLogError

MSG_TRASH_FAILED = "Failed moving file to trash"
MSG_COPY_FAILED = "Failed copying file"


class ErrorLog:
    """
    File-backed sink for recoverable failures.

    Opening happens in the constructor so a log that cannot be created
    stops the run before any file is touched.  Usable as a context manager.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self.count = 0
        try:
            self._handler = logging.FileHandler(str(self._path), mode="a", encoding="utf-8")
        except OSError as exc:
            raise ErrorLogError(f"Failed opening {self._path}: {exc}") from exc
        self._handler.setFormatter(
            logging.Formatter("%(asctime)s %(message)s", datefmt="%Y/%m/%d %H:%M:%S")
        )
        # Not registered with the logging manager, so nothing reaches the root logger
        self._logger = logging.Logger(f"{__name__}.sink", level=logging.INFO)
        self._logger.addHandler(self._handler)

    @property
    def path(self) -> Path:
        return self._path

    def record(self, description: str, name: str) -> None:
        """Append ``<description>: <name>`` to the log."""
        self._logger.info("%s: %s", description, name)
        self.count += 1

    def close(self) -> None:
        self._logger.removeHandler(self._handler)
        self._handler.close()

    def __enter__(self) -> "ErrorLog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
