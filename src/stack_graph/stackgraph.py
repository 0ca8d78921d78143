from __future__ import annotations

import logging
import os
import time
from datetime import datetime

from .graphaggregator import Aggregator
from .graphconfig import StackGraphConfig
from .graphemitter import ReportEmitter
from .graphemitter import ReportError
from .graphfilter import EntryFilter
from .graphmodel import ReportPaths
from .graphmodel import StackedSeries
from .graphstacker import stack
from .graphwalker import Walker

TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


class StackGraph:
    """Build a stacked size-over-time report for a set of directories."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: StackGraphConfig, *, now: float | None = None) -> None:
        """
        Initialize a new StackGraph.

        Args:
            config: The configuration to use for this run.

        Keyword Args:
            now: The time the run is considered to start at. Used for the age
                cutoff and the output names. Defaults to the current time.

        Raises:
            ValueError: When the output directory setting is invalid.
        """
        self._config = config
        self._now = time.time() if now is None else now

        timestamp = datetime.fromtimestamp(self._now).strftime(TIMESTAMP_FORMAT)
        self.paths = ReportPaths.build(
            run_directory=config.run_directory(timestamp),
            label=config.file_label,
            timestamp=timestamp,
        )

        self._aggregator = Aggregator()
        self._walker = Walker(
            EntryFilter(
                config.exclude_patterns,
                max_age=config.max_age_seconds,
                now=self._now,
            ),
            follow_symlinks=config.follow,
        )

    @property
    def aggregator(self) -> Aggregator:
        return self._aggregator

    def run(self) -> ReportPaths:
        """
        Walk every directory, then write the report files.

        Raises:
            ReportError: When the output directory or files cannot be written.
        """
        self.make_run_directory()
        self.collect()
        self.report()
        return self.paths

    def make_run_directory(self) -> None:
        """Create the run directory if it does not exist."""
        try:
            os.makedirs(self.paths.run_directory, exist_ok=True)

        except OSError as error:
            raise ReportError(
                f"Can't create output directory {self.paths.run_directory}: {error}"
            ) from error

    def collect(self) -> None:
        """Walk the configured directories, skipping any that are not directories."""
        self.logger.info("Collecting file sizes...")
        tic = time.perf_counter()

        for directory in self._config.directories:
            if directory in self._aggregator.totals:
                self.logger.debug("'%s' given more than once, skipping", directory)
                continue

            if not os.path.isdir(directory):
                self.logger.debug("Skipping '%s', not a directory", directory)
                continue

            self.logger.debug("Walking directory: %s", directory)
            self._aggregator.collect(directory, self._walker)
            self.logger.info(
                "%s: %s bytes",
                directory,
                self._aggregator.totals[directory],
            )

        toc = time.perf_counter()
        self.logger.info("Collecting finished in %s seconds", toc - tic)

    def stack(self) -> StackedSeries:
        """Return the stacked series of everything collected so far."""
        return stack(self._aggregator.buckets, self._aggregator.totals)

    def report(self) -> None:
        """Write the data and control files for the collected sizes."""
        series = self.stack()
        if not series.table:
            self.logger.warning("No files found, writing an empty graph")

        ReportEmitter(self.paths).emit(series, self._aggregator.totals)
        self.logger.info(
            "Wrote %s dates for %s roots",
            len(series.table),
            len(series.ordered_roots),
        )
