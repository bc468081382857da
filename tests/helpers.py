import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

# A moment well before any test run; source files are back-dated to it
OLD = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
RUN1 = datetime(2026, 10, 19, 14, 30, 0, tzinfo=timezone.utc)
RUN2 = RUN1 + timedelta(minutes=5)


def set_mtime(path: Path, when: datetime) -> None:
    ns = int(when.timestamp()) * 1_000_000_000 + when.microsecond * 1000
    os.utime(path, ns=(ns, ns))


def write(path: Path, content: str = "data", when: datetime = OLD) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    set_mtime(path, when)
    return path


def fixed_clock(when: datetime):
    return lambda: when
