from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest


def make_file(path: Path, size: int, year: int, month: int, day: int) -> Path:
    """Write a file of `size` bytes last modified at local noon of the given day."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    mtime = datetime(year, month, day, 12).timestamp()
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """
    Two roots:

        root_a/one.txt          1000 bytes  2020-01-01
        root_a/sub/two.log      2000 bytes  2020-01-02
        root_b/big.bin          5000 bytes  2020-01-01
    """
    make_file(tmp_path / "root_a" / "one.txt", 1000, 2020, 1, 1)
    make_file(tmp_path / "root_a" / "sub" / "two.log", 2000, 2020, 1, 2)
    make_file(tmp_path / "root_b" / "big.bin", 5000, 2020, 1, 1)
    return tmp_path
