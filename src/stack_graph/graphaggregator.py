from __future__ import annotations

import logging
from datetime import date
from types import MappingProxyType
from typing import TYPE_CHECKING
from typing import Mapping

if TYPE_CHECKING:
    from typing import Protocol

    class _Walker(Protocol):
        def traverse(self, root: str) -> dict[date, int]:
            ...


class Aggregator:
    """Hold the date buckets and running total of every root walked in a run."""

    logger = logging.getLogger(__name__)

    def __init__(self) -> None:
        self._buckets: dict[str, dict[date, int]] = {}
        self._totals: dict[str, int] = {}

    @property
    def roots(self) -> list[str]:
        """Return the roots in the order they were added."""
        return list(self._buckets)

    @property
    def buckets(self) -> Mapping[str, Mapping[date, int]]:
        return MappingProxyType(self._buckets)

    @property
    def totals(self) -> Mapping[str, int]:
        return MappingProxyType(self._totals)

    def add(self, root: str, buckets: Mapping[date, int]) -> None:
        """Merge the date buckets of a finished root walk."""
        root_buckets = self._buckets.setdefault(root, {})
        for day, size in buckets.items():
            root_buckets[day] = root_buckets.get(day, 0) + size

        self._totals[root] = self._totals.get(root, 0) + sum(buckets.values())
        self.logger.debug(
            "Added %s dates for '%s', total now %s bytes",
            len(buckets),
            root,
            self._totals[root],
        )

    def collect(self, root: str, walker: _Walker) -> None:
        """Walk the root and add its buckets."""
        self.add(root, walker.traverse(root))
