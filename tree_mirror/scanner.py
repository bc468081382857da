"""Tree scanner for Tree Mirror.

Walks a root folder and returns one FileRecord per regular file.  Any
directory called ``trash`` is pruned together with everything below it,
so the output tree's own trash area never takes part in a sync.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from tree_mirror.errors import ScanError

logger = logging.getLogger(__name__)

TRASH_DIR_NAME = "trash"


@dataclass(frozen=True)
class FileRecord:
    """A regular file found by a scan."""
    name: str
    location: Path
    mod_time: datetime
    is_new: bool = False


def mtime_of(st: os.stat_result) -> datetime:
    """Return the modification time of *st* as an aware UTC datetime.

    Built from ``st_mtime_ns`` so the value is exact to the microsecond
    instead of going through a float.
    """
    micros = st.st_mtime_ns // 1000
    seconds, micros = divmod(micros, 1_000_000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(microseconds=micros)


def is_new_since(mod_time: datetime, last_run: datetime | None) -> bool:
    """A file is new when there is no previous run or it changed strictly after it."""
    return last_run is None or mod_time > last_run


def scan_tree(root: Path | str, last_run: datetime | None = None) -> list[FileRecord]:
    """
    Return a FileRecord for every regular file below *root*.

    Parameters
    ----------
    root : Path or str
        Folder to walk.  Must exist and be listable, otherwise ScanError.
    last_run : datetime, optional
        Start of the previous completed run.  Drives ``is_new``; pass None
        to mark every file as new (or when scanning the output tree, where
        the flag is ignored).

    Entries that cannot be accessed are logged and skipped.
    """
    root = Path(root)
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise ScanError(f"Unable to gather files from {root}: {exc}") from exc

    def _on_walk_error(exc: OSError) -> None:
        logger.warning("Failed accessing the path %s: %s", exc.filename, exc.strerror or exc)

    files: list[FileRecord] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        # prune in place so os.walk never descends into a trash folder
        dirnames[:] = [d for d in dirnames if d != TRASH_DIR_NAME]

        for name in filenames:
            path = Path(dirpath) / name
            try:
                st = path.stat()
            except OSError as exc:
                logger.warning("Failed accessing the path %s: %s", path, exc)
                continue
            if not stat.S_ISREG(st.st_mode):
                logger.debug("Skipping non-regular file %s", path)
                continue

            mod_time = mtime_of(st)
            files.append(
                FileRecord(
                    name=name,
                    location=path,
                    mod_time=mod_time,
                    is_new=is_new_since(mod_time, last_run),
                )
            )

    logger.debug("Scanned %s: %d files", root, len(files))
    return files
