"""
File copy engine for Tree Mirror.

Writes each file of the copy set to the same relative path under the
output root, creating folders on the way and overwriting whatever is
already there.  Only file content is copied; permissions, ownership and
timestamps are not carried over.
A failed copy is logged and the remaining files are still processed.
"""

import logging
import shutil
from pathlib import Path

from tree_mirror.errorlog import MSG_COPY_FAILED, ErrorLog
from tree_mirror.scanner import FileRecord

logger = logging.getLogger(__name__)


class Synchronizer:
    """
    Copies input files into the output tree.

    Parameters
    ----------
    output_root : Path or str
        The mirror root to copy into.
    error_log : ErrorLog
        Receives one line per file that could not be copied.
    """

    def __init__(self, output_root: Path | str, error_log: ErrorLog):
        self.output_root = Path(output_root)
        self._error_log = error_log

    def destination(self, rel_path: str) -> Path:
        return self.output_root / rel_path

    def copy_file(self, rel_path: str, rec: FileRecord) -> bool:
        """Copy one file.  Returns False (and logs the failure) on error."""
        dest = self.destination(rel_path)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(rec.location, dest)
        except OSError as exc:
            logger.warning("Copy failed for %s: %s", rec.location, exc)
            self._error_log.record(MSG_COPY_FAILED, rec.name)
            return False
        logger.info("Copied %s", rel_path)
        return True

    def copy_all(self, to_copy: list[tuple[str, FileRecord]]) -> tuple[int, int]:
        """Copy every pair in *to_copy*.  Returns ``(copied, failed)``."""
        copied = failed = 0
        for rel, rec in to_copy:
            if self.copy_file(rel, rec):
                copied += 1
            else:
                failed += 1
        return copied, failed
