from __future__ import annotations

import logging
import os
from datetime import date
from datetime import datetime
from pathlib import Path

import pytest
from conftest import make_file
from pytest import LogCaptureFixture

from stack_graph.graphfilter import EntryFilter
from stack_graph.graphwalker import Walker

JAN_1 = date(2020, 1, 1)
JAN_2 = date(2020, 1, 2)


def build_walker(*patterns: str, follow: bool = False, max_age: int | None = None) -> Walker:
    now = datetime(2020, 1, 3, 12).timestamp()
    return Walker(EntryFilter(patterns, max_age=max_age, now=now), follow_symlinks=follow)


def test_traverse_buckets_by_modified_date(tree: Path) -> None:
    result = build_walker().traverse(str(tree / "root_a"))

    assert result == {JAN_1: 1000, JAN_2: 2000}


def test_traverse_conserves_size(tmp_path: Path) -> None:
    sizes = [0, 1, 17, 4096, 12345]
    for index, size in enumerate(sizes):
        make_file(tmp_path / f"d{index % 2}" / f"f{index}", size, 2019, 12, index + 1)

    result = build_walker().traverse(str(tmp_path))

    assert sum(result.values()) == sum(sizes)
    assert len(result) == len(sizes)


def test_iter_files_yields_only_files(tree: Path) -> None:
    entries = list(build_walker().iter_files(str(tree)))

    assert sorted(os.path.basename(entry.path) for entry in entries) == [
        "big.bin",
        "one.txt",
        "two.log",
    ]


@pytest.mark.parametrize("root", ["does/not/exist", "root_b/big.bin"])
def test_traverse_skips_non_directories(tree: Path, root: str) -> None:
    assert build_walker().traverse(str(tree / root)) == {}


@pytest.mark.parametrize("follow", [False, True])
def test_unanchored_exclusion_applies_in_both_modes(tree: Path, follow: bool) -> None:
    walker = build_walker("/sub/", follow=follow)

    assert walker.traverse(str(tree / "root_a")) == {JAN_1: 1000}


def test_excluded_file_contributes_nothing(tree: Path) -> None:
    walker = build_walker(r"\.txt$")

    assert walker.traverse(str(tree / "root_a")) == {JAN_2: 2000}


def test_excluded_directory_is_pruned_without_follow(tree: Path) -> None:
    # The pattern only matches the directory itself, not the files below it
    walker = build_walker("sub$")

    assert walker.traverse(str(tree / "root_a")) == {JAN_1: 1000}


def test_excluded_directory_is_walked_with_follow(tree: Path) -> None:
    walker = build_walker("sub$", follow=True)

    assert walker.traverse(str(tree / "root_a")) == {JAN_1: 1000, JAN_2: 2000}


def test_age_cutoff(tree: Path) -> None:
    # now is 2020-01-03 noon, one.txt is two days old and two.log one day old
    walker = build_walker(max_age=86400)

    assert walker.traverse(str(tree / "root_a")) == {JAN_2: 2000}


def test_symlinked_file_counted_only_with_follow(tree: Path) -> None:
    link = tree / "root_a" / "link.bin"
    os.symlink(tree / "root_b" / "big.bin", link)

    assert build_walker().traverse(str(tree / "root_a")) == {JAN_1: 1000, JAN_2: 2000}
    assert build_walker(follow=True).traverse(str(tree / "root_a")) == {
        JAN_1: 6000,
        JAN_2: 2000,
    }


def test_symlinked_directory_walked_only_with_follow(tree: Path) -> None:
    os.symlink(tree / "root_b", tree / "root_a" / "linked")

    assert build_walker().traverse(str(tree / "root_a")) == {JAN_1: 1000, JAN_2: 2000}
    assert build_walker(follow=True).traverse(str(tree / "root_a")) == {
        JAN_1: 6000,
        JAN_2: 2000,
    }


def test_follow_stops_at_symlink_cycles(tree: Path) -> None:
    os.symlink(tree / "root_a", tree / "root_a" / "sub" / "loop")

    result = build_walker(follow=True).traverse(str(tree / "root_a"))

    assert result == {JAN_1: 1000, JAN_2: 2000}


def test_broken_symlink_is_skipped_with_follow(tree: Path, caplog: LogCaptureFixture) -> None:
    os.symlink(tree / "missing", tree / "root_a" / "dangling")

    with caplog.at_level(logging.WARNING):
        result = build_walker(follow=True).traverse(str(tree / "root_a"))

    assert result == {JAN_1: 1000, JAN_2: 2000}
    assert "Unable to stat" in caplog.text


def test_build_file_entry_missing_file(tmp_path: Path, caplog: LogCaptureFixture) -> None:
    walker = build_walker()

    with caplog.at_level(logging.WARNING):
        result = walker._build_file_entry(str(tmp_path / "gone.txt"))

    assert result is None
    assert "gone.txt" in caplog.text


def test_walk_error_is_logged(caplog: LogCaptureFixture) -> None:
    error = PermissionError(13, "Permission denied", "/locked")

    with caplog.at_level(logging.WARNING):
        build_walker()._on_walk_error(error)

    assert "Unable to read '/locked'" in caplog.text
