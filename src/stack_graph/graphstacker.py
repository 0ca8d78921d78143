"""
Turn per-root date buckets into cumulative columns for a stacked graph.

The value recorded for a root on a date is the number of bytes of that root's
files modified on or after that date. Reading the graph at any date gives the
space that would remain if every older file were deleted.
"""
from __future__ import annotations

from datetime import date
from typing import Mapping

from .graphmodel import StackedSeries


def order_roots(
    roots_data: Mapping[str, Mapping[date, int]],
    root_totals: Mapping[str, int],
) -> list[str]:
    """Return every root, largest total first, ties by path."""
    return sorted(roots_data, key=lambda root: (-root_totals.get(root, 0), root))


def stack(
    roots_data: Mapping[str, Mapping[date, int]],
    root_totals: Mapping[str, int],
) -> StackedSeries:
    """
    Build the cumulative table for all roots.

    Args:
        roots_data: Date buckets per root.
        root_totals: Total bytes per root, used for ordering only.

    Returns:
        The ordered roots and, for every date seen in any root, the running
        total of each root accumulated from the newest date back to that one.
    """
    ordered_roots = order_roots(roots_data, root_totals)

    dates: set[date] = set()
    for root in ordered_roots:
        dates.update(roots_data[root])

    accumulator = {root: 0 for root in ordered_roots}
    table: dict[date, dict[str, int]] = {}

    for day in sorted(dates, reverse=True):
        for root in ordered_roots:
            accumulator[root] += roots_data[root].get(day, 0)

        table[day] = dict(accumulator)

    return StackedSeries(ordered_roots=ordered_roots, table=table)
