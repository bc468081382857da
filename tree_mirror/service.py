"""
Headless runner for Tree Mirror.

Runs a sync immediately, then again every ``intervalSeconds`` until
SIGINT/SIGTERM.  With ``watchInput`` enabled, a change in the input tree
brings the next run forward (after ``settleSeconds`` of quiet).

Runs never overlap: the scheduler holds a lock for the duration of a run
and drops any trigger that arrives while one is in progress.
"""

import logging
import logging.handlers
import signal
import sys
import threading
from collections.abc import Callable

from tree_mirror import __app_name__, __version__
from tree_mirror.config import Config
from tree_mirror.errors import ConfigError, ScanError
from tree_mirror.sync import RunReport, run_once
from tree_mirror.watcher import InputWatcher

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: Config) -> None:
    """Configure the stderr handler and, if ``logFile`` is set, a rotating file log."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)

    if config.log_file:
        try:
            fh = logging.handlers.RotatingFileHandler(
                config.log_file,
                maxBytes=config.max_log_size_mb * 1024 * 1024,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConfigError(f"Failed opening log file {config.log_file}: {exc}") from exc
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root_logger.addHandler(fh)


class Scheduler:
    """
    Calls *run* on a fixed interval, one invocation at a time.

    Parameters
    ----------
    run : callable
        Performs one sync.  Exceptions propagate out of ``serve_forever``.
    interval : float
        Seconds to wait after a run before starting the next one.
    settle : float
        Quiet period required after ``request_run`` before the early run.
    """

    def __init__(self, run: Callable[[], RunReport], interval: float, settle: float = 0.0):
        self._run = run
        self.interval = interval
        self.settle = settle
        self._busy = threading.Lock()
        self._wake = threading.Event()
        self._stop = threading.Event()
        self.runs = 0

    def request_run(self) -> None:
        """Ask for a run before the interval elapses."""
        self._wake.set()

    def stop(self) -> None:
        self._stop.set()
        self._wake.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run_guarded(self) -> bool:
        """Run once unless a run is already in progress.  Returns True if it ran."""
        if not self._busy.acquire(blocking=False):
            logger.warning("A run is already in progress; skipping this trigger.")
            return False
        try:
            self._run()
            self.runs += 1
        finally:
            self._busy.release()
        return True

    def _wait_for_trigger(self) -> None:
        if self._wake.wait(timeout=self.interval):
            # keep waiting while changes keep arriving
            while self._wake.is_set() and not self._stop.is_set():
                self._wake.clear()
                self._stop.wait(self.settle)
        self._wake.clear()

    def serve_forever(self) -> None:
        """Run now, then after every interval or early request, until stopped."""
        while not self._stop.is_set():
            self.run_guarded()
            self._wait_for_trigger()


def run_forever(config: Config) -> None:
    """
    Run the scheduler in the foreground until SIGINT/SIGTERM.

    *config* supplies the interval and watch settings.  The first run uses
    it as is; later runs re-read ``config.path`` so edits take effect.
    """
    runs = 0

    def _run() -> RunReport:
        nonlocal runs
        runs += 1
        return run_once(config if runs == 1 else Config(config.path))

    scheduler = Scheduler(
        _run,
        interval=config.interval,
        settle=config.settle_time,
    )

    watcher = None
    if config.watch_input:
        watcher = InputWatcher(str(config.input_path), scheduler.request_run)
        try:
            watcher.start()
        except OSError as exc:
            raise ScanError(f"Unable to watch {config.input_path}: {exc}") from exc

    def _handler(sig, frame):
        logger.info("Received signal %d, stopping after the current run.", sig)
        scheduler.stop()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)

    logger.info(
        "%s %s running: '%s' -> '%s' every %ds",
        __app_name__, __version__, config.input_path, config.output_path, config.interval,
    )
    try:
        scheduler.serve_forever()
    finally:
        if watcher:
            watcher.stop()
    logger.info("%s stopped.", __app_name__)
