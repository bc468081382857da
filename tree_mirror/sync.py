"""
One sync run, start to finish.

``run_once`` is the whole job: scan both trees, trash orphans, copy new
files, remember when the run started.  It raises a MirrorError subclass
for anything that must abort the run and otherwise returns a RunReport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from tree_mirror.classifier import classify
from tree_mirror.config import Config
from tree_mirror.copier import Synchronizer
from tree_mirror.errorlog import ErrorLog
from tree_mirror.errors import OutputRootError
from tree_mirror.scanner import TRASH_DIR_NAME, scan_tree
from tree_mirror.state import RunStateStore
from tree_mirror.trash import TrashArchiver

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Return the current time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


@dataclass
class RunReport:
    """Outcome of a single run."""
    started: datetime
    input_files: int = 0
    output_files: int = 0
    archived: int = 0
    trash_failed: int = 0
    copied: int = 0
    copy_failed: int = 0

    @property
    def failed(self) -> int:
        return self.trash_failed + self.copy_failed

    def summary(self) -> str:
        return (
            f"{self.input_files} input / {self.output_files} output files, "
            f"{self.copied} copied, {self.archived} trashed, {self.failed} failed"
        )


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputRootError(f"Error creating directory {path}: {exc}") from exc


def run_once(
    config: Config,
    state: RunStateStore | None = None,
    error_log_path: Path | str | None = None,
    clock: Callable[[], datetime] = local_now,
) -> RunReport:
    """
    Mirror ``config.input_path`` into ``config.output_path`` once.

    Parameters
    ----------
    config : Config
        Trees and policy for this run.
    state : RunStateStore, optional
        Where the last run time lives.  Defaults to ``config.state_file``.
    error_log_path : Path or str, optional
        Append-only failure log.  Defaults to ``config.error_log``.
    clock : callable
        Returns the run start as an aware datetime.  Called exactly once,
        before anything is scanned, so files changed mid-run are picked up
        next time.
    """
    started = clock()
    report = RunReport(started=started)
    state = state or RunStateStore(config.state_file)
    input_root = config.input_path
    output_root = config.output_path

    _ensure_dir(output_root)
    _ensure_dir(output_root / TRASH_DIR_NAME)

    with ErrorLog(error_log_path or config.error_log) as error_log:
        last_run = state.load()

        inputs = scan_tree(input_root, last_run)
        outputs = scan_tree(output_root)
        report.input_files = len(inputs)
        report.output_files = len(outputs)

        changes = classify(inputs, outputs, input_root, output_root, config.sync_policy)

        archiver = TrashArchiver(output_root, error_log)
        report.archived, report.trash_failed = archiver.archive(changes.orphans, started)

        synchronizer = Synchronizer(output_root, error_log)
        report.copied, report.copy_failed = synchronizer.copy_all(changes.to_copy)

    state.save(started)
    if report.failed:
        logger.warning("Run finished with %d failures, see %s", report.failed, error_log.path)
    logger.info("Run complete: %s", report.summary())
    return report
