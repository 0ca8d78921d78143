from __future__ import annotations

import dataclasses
import os
from datetime import date
from typing import Iterator


@dataclasses.dataclass(frozen=True)
class FileEntry:
    """An included regular file found during a walk."""

    path: str
    size_bytes: int
    mtime: float

    @property
    def modified_date(self) -> date:
        """Return the local calendar date of the last modification."""
        return date.fromtimestamp(self.mtime)


@dataclasses.dataclass(frozen=True)
class StackedSeries:
    """Cumulative size per root for every date seen across all roots."""

    ordered_roots: list[str]
    table: dict[date, dict[str, int]]

    def __bool__(self) -> bool:
        return bool(self.ordered_roots)

    def rows(self) -> Iterator[tuple[date, list[int]]]:
        """Yield (date, values) in ascending date order, values in root order."""
        for day in sorted(self.table):
            yield day, [self.table[day][root] for root in self.ordered_roots]


@dataclasses.dataclass(frozen=True)
class ReportPaths:
    """Where a single run writes its files."""

    run_directory: str
    control_file: str
    data_file: str
    image_file: str
    log_file: str

    @classmethod
    def build(cls, run_directory: str, label: str, timestamp: str) -> ReportPaths:
        """Name the report files for the given label and run timestamp."""
        return cls(
            run_directory=run_directory,
            control_file=f"plot-{label}-{timestamp}.gnuplot",
            data_file=f"data-{label}-{timestamp}.txt",
            image_file=f"output-{label}-{timestamp}.png",
            log_file=f"stack_graph-{label}-{timestamp}.log",
        )

    @property
    def control_path(self) -> str:
        return os.path.join(self.run_directory, self.control_file)

    @property
    def data_path(self) -> str:
        return os.path.join(self.run_directory, self.data_file)

    @property
    def log_path(self) -> str:
        return os.path.join(self.run_directory, self.log_file)
