from __future__ import annotations

import logging
import os
import stat
from datetime import date
from typing import Iterator

from .graphfilter import EntryFilter
from .graphmodel import FileEntry


class Walker:
    """Walk a root directory and report the size and age of included files."""

    logger = logging.getLogger(__name__)

    def __init__(self, entry_filter: EntryFilter, *, follow_symlinks: bool = False) -> None:
        """
        Initialize a new Walker.

        Args:
            entry_filter: Decides which entries are counted.

        Keyword Args:
            follow_symlinks: Resolve symbolic links and walk them as their
                target type. When False links are neither files nor
                directories and are never counted.

        NOTE: Excluded directories are only pruned before descending when
            symlinks are not followed. In follow mode they are walked and
            their contents are excluded one entry at a time, which costs more
            but only changes results for patterns anchored to the directory.
        """
        self._filter = entry_filter
        self._follow = follow_symlinks

    def traverse(self, root: str) -> dict[date, int]:
        """Return the bytes of included files under root keyed by modified date."""
        buckets: dict[date, int] = {}
        for entry in self.iter_files(root):
            day = entry.modified_date
            buckets[day] = buckets.get(day, 0) + entry.size_bytes

        return buckets

    def iter_files(self, root: str) -> Iterator[FileEntry]:
        """
        Yield every included regular file below root.

        A root that is not a readable directory yields nothing.
        """
        if not os.path.isdir(root):
            self.logger.debug("Skipping '%s', not a directory", root)
            return

        root_stat = self._stat(root)
        if root_stat is None:
            return

        seen = {(root_stat.st_dev, root_stat.st_ino)}

        for dirpath, dirnames, filenames in os.walk(
            root,
            followlinks=self._follow,
            onerror=self._on_walk_error,
        ):
            dirnames[:] = self._visit_directories(dirpath, dirnames, seen)

            for filename in filenames:
                entry = self._build_file_entry(os.path.join(dirpath, filename))
                if entry is not None:
                    yield entry

    def _visit_directories(
        self,
        dirpath: str,
        dirnames: list[str],
        seen: set[tuple[int, int]],
    ) -> list[str]:
        """Return the subdirectory names of dirpath that should be descended."""
        keep: list[str] = []

        for dirname in dirnames:
            path = os.path.join(dirpath, dirname)

            if not self._follow:
                # Links to directories land here too, os.walk won't enter them
                if self._filter.is_excluded(path):
                    continue
                keep.append(dirname)
                continue

            dir_stat = self._stat(path)
            if dir_stat is None:
                continue

            key = (dir_stat.st_dev, dir_stat.st_ino)
            if key in seen:
                self.logger.debug("Already visited '%s', not descending", path)
                continue
            seen.add(key)
            keep.append(dirname)

        return keep

    def _build_file_entry(self, path: str) -> FileEntry | None:
        """Stat a non-directory entry, returning it if it is an included file."""
        file_stat = self._stat(path)
        if file_stat is None:
            return None

        is_file = stat.S_ISREG(file_stat.st_mode)
        is_dir = stat.S_ISDIR(file_stat.st_mode)

        if not self._filter.included(path, is_dir, is_file, file_stat.st_mtime):
            return None

        if not is_file:
            return None

        return FileEntry(path, file_stat.st_size, file_stat.st_mtime)

    def _stat(self, path: str) -> os.stat_result | None:
        """Stat the path per the follow mode. Failures are logged and return None."""
        try:
            if self._follow:
                return os.stat(path)
            return os.lstat(path)

        except OSError as error:
            self.logger.warning("Unable to stat '%s': %s", path, error)
            return None

    def _on_walk_error(self, error: OSError) -> None:
        self.logger.warning("Unable to read '%s': %s", error.filename, error)
