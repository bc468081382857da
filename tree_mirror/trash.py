"""
Trash archiver for Tree Mirror.

Output files whose source has gone are never deleted.  They are renamed
into ``<output>/trash``, keeping their sub-folder, with the run's start
time inserted before the extension::

    reports/q1.csv  ->  trash/reports/q1.20261019143000.csv

If that name is already taken (two runs in the same second), a counter
is appended: ``q1.20261019143000_1.csv``.
"""

import logging
import os
from datetime import datetime
from pathlib import Path

from tree_mirror.classifier import relative_key
from tree_mirror.errorlog import MSG_TRASH_FAILED, ErrorLog
from tree_mirror.scanner import TRASH_DIR_NAME, FileRecord

logger = logging.getLogger(__name__)

TRASH_STAMP_FORMAT = "%Y%m%d%H%M%S"


def trash_name(name: str, run_start: datetime) -> str:
    """Return *name* with ``.<YYYYMMDDhhmmss>`` inserted before its extension."""
    stem, ext = os.path.splitext(name)
    return f"{stem}.{run_start.strftime(TRASH_STAMP_FORMAT)}{ext}"


class TrashArchiver:
    """
    Moves orphaned output files into the trash folder.

    Parameters
    ----------
    output_root : Path or str
        Root of the mirror; the trash lives at ``output_root / "trash"``.
    error_log : ErrorLog
        Receives one line per file that could not be moved.
    """

    def __init__(self, output_root: Path | str, error_log: ErrorLog):
        self.output_root = Path(output_root)
        self.trash_root = self.output_root / TRASH_DIR_NAME
        self._error_log = error_log

    def destination(self, rel_path: str, name: str, run_start: datetime) -> Path:
        rel_dir = os.path.dirname(rel_path)
        return self.trash_root / rel_dir / trash_name(name, run_start)

    @staticmethod
    def _free_path(dest: Path) -> Path:
        """Return *dest*, or ``<stem>_<n><ext>`` when a same-second run already used it."""
        if not dest.exists():
            return dest
        stem, ext = os.path.splitext(dest.name)
        n = 1
        while True:
            candidate = dest.with_name(f"{stem}_{n}{ext}")
            if not candidate.exists():
                return candidate
            n += 1

    def archive(self, orphans: list[tuple[str, FileRecord]], run_start: datetime) -> tuple[int, int]:
        """Move every orphan to the trash.  Returns ``(archived, failed)``."""
        archived = failed = 0
        for rel, rec in orphans:
            dest = self.destination(rel, rec.name, run_start)
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                dest = self._free_path(dest)
                os.rename(rec.location, dest)
            except OSError as exc:
                failed += 1
                logger.warning("Failed moving %s to trash: %s", rec.location, exc)
                self._error_log.record(MSG_TRASH_FAILED, rec.name)
                continue
            archived += 1
            logger.info("Trashed %s -> %s", rel, relative_key(self.output_root, dest))
        return archived, failed
