"""Change classification between the input and output scans."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterable

from tree_mirror.config import POLICY_INCREMENTAL, POLICY_NEWER
from tree_mirror.scanner import TRASH_DIR_NAME, FileRecord

logger = logging.getLogger(__name__)


def relative_key(root: Path | str, location: Path | str) -> str:
    """Return the normalized path of *location* relative to *root*."""
    return os.path.normpath(os.path.relpath(location, root))


def index_by_relpath(records: Iterable[FileRecord], root: Path | str) -> dict[str, FileRecord]:
    """
    Map each record's path relative to *root* onto the record.

    A real walk never produces the same relative path twice.  If a caller
    passes duplicates anyway, the last record wins and a warning is logged.
    """
    index: dict[str, FileRecord] = {}
    for rec in records:
        key = relative_key(root, rec.location)
        if key in index:
            logger.warning("Duplicate relative path %s; keeping %s", key, rec.location)
        index[key] = rec
    return index


@dataclass
class Changes:
    """What a run has to do, as ``(relative path, record)`` pairs."""
    orphans: list[tuple[str, FileRecord]] = field(default_factory=list)
    to_copy: list[tuple[str, FileRecord]] = field(default_factory=list)


def _needs_copy(rec: FileRecord, existing: FileRecord | None, policy: str) -> bool:
    if policy == POLICY_NEWER:
        # copy unless the mirror already holds a strictly newer file
        return existing is None or not existing.mod_time > rec.mod_time
    return rec.is_new


def classify(
    inputs: Iterable[FileRecord],
    outputs: Iterable[FileRecord],
    input_root: Path | str,
    output_root: Path | str,
    policy: str = POLICY_INCREMENTAL,
) -> Changes:
    """
    Correlate both scans by relative path.

    Orphans are output files with no input file at the same relative path.
    The copy set depends on *policy*: with ``incremental`` it is every
    input file flagged new, with ``newer`` every input file whose output
    counterpart is missing or not strictly newer.  Anything else is left
    alone.
    """
    input_by_rel_path = index_by_relpath(inputs, input_root)
    output_by_rel_path = index_by_relpath(outputs, output_root)

    changes = Changes()
    for rel, rec in output_by_rel_path.items():
        if rel not in input_by_rel_path:
            changes.orphans.append((rel, rec))

    for rel, rec in input_by_rel_path.items():
        if not _needs_copy(rec, output_by_rel_path.get(rel), policy):
            continue
        if PurePath(rel).parts[0] == TRASH_DIR_NAME:
            logger.warning("Not copying %s: the path is reserved for the trash folder", rel)
            continue
        changes.to_copy.append((rel, rec))

    logger.debug(
        "Classified %d input / %d output files: %d orphans, %d to copy",
        len(input_by_rel_path), len(output_by_rel_path),
        len(changes.orphans), len(changes.to_copy),
    )
    return changes
