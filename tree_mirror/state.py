"""Run state persistence.

The only state that survives between runs is the start time of the last
completed run, stored as a single RFC 3339 timestamp (``time.txt`` by
default).
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from tree_mirror.errors import StateError

logger = logging.getLogger(__name__)


class RunStateStore:
    """Reads and writes the last-run timestamp file."""

    def __init__(self, path: Path | str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> datetime | None:
        """
        Return the last run's start time, or None when there is no usable one.

        A missing file, an unparsable value, or a timestamp without a UTC
        offset all mean "no prior run": every input file is then treated
        as new.  None of these fail the run.
        """
        try:
            raw = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            logger.info("No run state at %s; treating every file as new.", self._path)
            return None
        except OSError as exc:
            logger.warning("Could not read run state (%s); treating every file as new.", exc)
            return None

        try:
            last_run = datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Ignoring unparsable run state %r in %s", raw, self._path)
            return None

        if last_run.tzinfo is None:
            logger.warning("Ignoring run state without UTC offset %r in %s", raw, self._path)
            return None

        logger.debug("Last run started at %s", last_run.isoformat())
        return last_run

    def save(self, run_start: datetime) -> None:
        """Overwrite the stored timestamp with *run_start*.

        Raises StateError on failure: without it the next run cannot tell
        which files changed.
        """
        try:
            self._path.write_text(run_start.isoformat(), encoding="utf-8")
        except OSError as exc:
            raise StateError(f"Failed updating {self._path}: {exc}") from exc
        logger.debug("Run state saved: %s", run_start.isoformat())
