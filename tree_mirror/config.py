"""Configuration management for Tree Mirror.

Reads the per-run settings from a JSON file (``path.json`` in the working
directory by default).  Unlike a preferences file, a broken configuration
is never silently replaced by defaults: a run cannot know which trees to
mirror without it.
"""

import json
import logging
from pathlib import Path
from typing import Any

from tree_mirror.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("path.json")

# Copy policies
POLICY_INCREMENTAL = "incremental"  # copy files modified since the last run
POLICY_NEWER = "newer"              # copy unless the output copy is strictly newer

REQUIRED_KEYS = ("inputPath", "outputPath")

DEFAULT_CONFIG: dict[str, Any] = {
    "inputPath": "",
    "outputPath": "",
    "stateFile": "time.txt",
    "errorLog": "file_error.log",
    "intervalSeconds": 300,
    "syncPolicy": POLICY_INCREMENTAL,
    # ---- input watching ----
    "watchInput": False,  # trigger an early run when the input tree changes
    "settleSeconds": 5,   # quiet period after a change before running
    # ---- diagnostics ----
    "logLevel": "INFO",
    "logFile": "",        # blank = stderr only
    "maxLogSizeMb": 10,
    "logBackupCount": 3,
}


class Config:
    """Read-only configuration backed by a JSON file."""

    def __init__(self, path: Path | str | None = None):
        """Load config from *path*, falling back to ``./path.json``."""
        self._path = Path(path) if path else DEFAULT_CONFIG_PATH
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        """Load configuration from disk, applying defaults for optional keys.

        Raises ConfigError when the file cannot be read, is not a JSON
        object, or lacks one of the two tree roots.
        """
        try:
            with open(self._path, encoding="utf-8") as fh:
                stored = json.load(fh)
        except OSError as exc:
            raise ConfigError(f"Failed reading {self._path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed parsing {self._path}: {exc}") from exc

        if not isinstance(stored, dict):
            raise ConfigError(f"Failed parsing {self._path}: expected a JSON object")

        for key in REQUIRED_KEYS:
            value = stored.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{self._path}: '{key}' must be a non-empty string")

        policy = stored.get("syncPolicy", POLICY_INCREMENTAL)
        if policy not in (POLICY_INCREMENTAL, POLICY_NEWER):
            raise ConfigError(f"{self._path}: unknown syncPolicy {policy!r}")

        for key in ("intervalSeconds", "settleSeconds", "maxLogSizeMb", "logBackupCount"):
            value = stored.get(key, DEFAULT_CONFIG[key])
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{self._path}: '{key}' must be a number")

        # Merge stored values over defaults so optional keys get defaults
        self._data = {**DEFAULT_CONFIG, **stored}
        logger.debug("Configuration loaded from %s", self._path)

    # ---- trees ----

    @property
    def input_path(self) -> Path:
        """Return the root of the tree being mirrored."""
        return Path(self._data["inputPath"])

    @property
    def output_path(self) -> Path:
        """Return the root of the mirror."""
        return Path(self._data["outputPath"])

    # ---- run resources ----

    @property
    def state_file(self) -> Path:
        """Return the file holding the last run timestamp."""
        return Path(self._data["stateFile"])

    @property
    def error_log(self) -> Path:
        """Return the append-only per-file failure log."""
        return Path(self._data["errorLog"])

    @property
    def sync_policy(self) -> str:
        return self._data["syncPolicy"]

    # ---- scheduling ----

    @property
    def interval(self) -> int:
        """Return the seconds between scheduled runs (minimum 1)."""
        return max(1, int(self._data["intervalSeconds"]))

    @property
    def watch_input(self) -> bool:
        return bool(self._data["watchInput"])

    @property
    def settle_time(self) -> float:
        return max(0.0, float(self._data["settleSeconds"]))

    # ---- diagnostics ----

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return str(self._data.get("logLevel", "INFO"))

    @property
    def log_file(self) -> str:
        return str(self._data.get("logFile") or "")

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return max(1, int(self._data["maxLogSizeMb"]))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return max(0, int(self._data["logBackupCount"]))
