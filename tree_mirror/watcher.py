"""File system watcher for Tree Mirror.

Uses the watchdog library to notice changes in the input tree so the
scheduler can start a run before the next interval elapses.  The watcher
only signals; it never copies anything itself.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import PurePath
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from tree_mirror.scanner import TRASH_DIR_NAME

logger = logging.getLogger(__name__)


def _in_trash(path: str | bytes) -> bool:
    return TRASH_DIR_NAME in PurePath(os.fsdecode(path)).parts


class InputChangeHandler(FileSystemEventHandler):
    """Watchdog handler that calls *on_change* for any file event outside ``trash``."""

    def __init__(self, on_change: Callable[[], None]):
        super().__init__()
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [event.src_path]
        if getattr(event, "dest_path", ""):
            paths.append(event.dest_path)
        if all(_in_trash(p) for p in paths):
            return
        logger.debug("Input change (%s): %s", event.event_type, event.src_path)
        self._on_change()


class InputWatcher:
    """Recursive watchdog observer on the input tree.

    Usage:
        watcher = InputWatcher(input_root, scheduler.request_run)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(self, input_folder: str, on_change: Callable[[], None]):
        self.input_folder = input_folder
        self._handler = InputChangeHandler(on_change)
        self._observer: Any | None = None

    def start(self) -> None:
        """Start watching the input folder."""
        if not os.path.isdir(self.input_folder):
            logger.error("Input folder does not exist: %s", self.input_folder)
            raise FileNotFoundError(f"Input folder does not exist: {self.input_folder}")

        observer = Observer()
        self._observer = observer
        observer.schedule(self._handler, self.input_folder, recursive=True)
        observer.start()
        logger.info("Watching '%s' for changes", self.input_folder)

    def stop(self) -> None:
        """Stop watching and release resources."""
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("Watcher stopped.")

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()
