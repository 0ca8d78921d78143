from __future__ import annotations

import logging
import re
import time
from typing import Iterable


class EntryFilter:
    """Decide whether a filesystem entry takes part in the size totals."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        exclude_patterns: Iterable[str | re.Pattern[str]] = (),
        *,
        max_age: int | None = None,
        now: float | None = None,
    ) -> None:
        """
        Initialize a new EntryFilter.

        Args:
            exclude_patterns: Regular expressions searched for anywhere in the
                full path of each entry. A match excludes the entry.

        Keyword Args:
            max_age: Files modified more than this many seconds before `now`
                are excluded. None or 0 disables the age cutoff.
            now: The reference time for the age cutoff. Defaults to the time
                the filter was created.
        """
        self._patterns = [re.compile(ptn) for ptn in exclude_patterns]
        self._max_age = max_age or None
        self._now = time.time() if now is None else now

    def is_excluded(self, path: str) -> bool:
        """True if the path matches any exclusion pattern."""
        for ptn in self._patterns:
            if ptn.search(path):
                self.logger.debug("Excluding '%s' (matched %s)", path, ptn.pattern)
                return True

        return False

    def is_too_old(self, mtime: float) -> bool:
        """True if an age cutoff is set and the mtime falls outside of it."""
        return self._max_age is not None and self._now - mtime > self._max_age

    def included(
        self,
        path: str,
        is_dir: bool,
        is_file: bool,
        mtime: float | None = None,
    ) -> bool:
        """
        Return True if the entry should be visited and counted.

        Args:
            path: The full traversal path of the entry.
            is_dir: The entry resolved to a directory.
            is_file: The entry resolved to a regular file.
            mtime: Modification time of the entry, used for the age cutoff.
        """
        if self.is_excluded(path):
            return False

        if not is_file and not is_dir:
            self.logger.debug("Skipping '%s', not a file or directory", path)
            return False

        if is_file and mtime is not None and self.is_too_old(mtime):
            self.logger.debug("Skipping '%s', older than %s seconds", path, self._max_age)
            return False

        return True
