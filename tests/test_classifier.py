import logging
from datetime import timedelta
from pathlib import Path

from tests.helpers import OLD
from tree_mirror.classifier import classify, index_by_relpath, relative_key
from tree_mirror.config import POLICY_NEWER
from tree_mirror.scanner import FileRecord

IN = Path("/data/in")
OUT = Path("/data/out")


def rec(root, rel, is_new=False, mod_time=OLD):
    location = root / rel
    return FileRecord(name=location.name, location=location, mod_time=mod_time, is_new=is_new)


def rels(pairs):
    return sorted(rel for rel, _ in pairs)


def test_relative_key_is_normalized():
    assert relative_key(IN, IN / "a" / "." / "b.txt") == str(Path("a") / "b.txt")


def test_duplicates_keep_last_record(caplog):
    first = rec(IN, "a.txt")
    second = rec(IN, "a.txt", is_new=True)

    with caplog.at_level(logging.WARNING, logger="tree_mirror.classifier"):
        index = index_by_relpath([first, second], IN)

    assert index == {"a.txt": second}
    assert "Duplicate relative path" in caplog.text


def test_orphans_and_new_files():
    inputs = [rec(IN, "same.txt"), rec(IN, "sub/new.txt", is_new=True), rec(IN, "changed.txt", is_new=True)]
    outputs = [rec(OUT, "same.txt"), rec(OUT, "changed.txt"), rec(OUT, "sub/gone.txt")]

    changes = classify(inputs, outputs, IN, OUT)

    assert rels(changes.orphans) == [str(Path("sub") / "gone.txt")]
    assert rels(changes.to_copy) == ["changed.txt", str(Path("sub") / "new.txt")]


def test_unchanged_files_present_in_both_are_left_alone():
    changes = classify([rec(IN, "a.txt")], [rec(OUT, "a.txt")], IN, OUT)
    assert changes.orphans == []
    assert changes.to_copy == []


def test_orphan_records_come_from_the_output_tree():
    [(rel, orphan)] = classify([], [rec(OUT, "x/y.txt")], IN, OUT).orphans
    assert orphan.location == OUT / "x" / "y.txt"


def test_input_under_trash_prefix_is_never_copied(caplog):
    with caplog.at_level(logging.WARNING, logger="tree_mirror.classifier"):
        changes = classify([rec(IN, "trash", is_new=True), rec(IN, "ok", is_new=True)], [], IN, OUT)
    assert rels(changes.to_copy) == ["ok"]
    assert "reserved" in caplog.text


def test_newer_policy_skips_only_strictly_newer_outputs():
    later = OLD + timedelta(seconds=10)
    inputs = [rec(IN, "older-out.txt"), rec(IN, "newer-out.txt"), rec(IN, "same.txt"), rec(IN, "missing.txt")]
    outputs = [
        rec(OUT, "older-out.txt", mod_time=OLD - timedelta(seconds=10)),
        rec(OUT, "newer-out.txt", mod_time=later),
        rec(OUT, "same.txt", mod_time=OLD),
    ]

    changes = classify(inputs, outputs, IN, OUT, POLICY_NEWER)

    assert rels(changes.to_copy) == ["missing.txt", "older-out.txt", "same.txt"]
