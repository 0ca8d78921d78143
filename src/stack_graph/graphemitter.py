from __future__ import annotations

import logging
from typing import Mapping

from .graphmodel import ReportPaths
from .graphmodel import StackedSeries

GNUPLOT_HEADER = """
set xrange [] reverse
set xdata time
# set terminal png size 900, 300
set terminal png #enhanced truecolor
set output "{image_file}"
set style fill solid
set ylabel "Size in MB"
set timefmt "%Y-%m-%d"

set xtics rotate by 90 offset 0, -4
set bmargin 8

set grid
set multiplot
"""


class ReportError(Exception):
    """A report file could not be written."""


class ReportEmitter:
    """Write the data table and gnuplot control file of a run."""

    logger = logging.getLogger(__name__)

    def __init__(self, paths: ReportPaths) -> None:
        self._paths = paths

    def emit(self, series: StackedSeries, totals: Mapping[str, int]) -> None:
        """
        Write both report files into the run directory.

        Raises:
            ReportError: When either file cannot be opened for writing.
        """
        self._write(self._paths.control_path, self.control_script(series, totals))
        self._write(self._paths.data_path, "".join(self.data_lines(series)))

    def control_script(self, series: StackedSeries, totals: Mapping[str, int]) -> str:
        """Return the gnuplot script that draws the stacked series."""
        clauses = self.plot_clauses(series, totals) or ["0"]

        header = GNUPLOT_HEADER.format(image_file=self._paths.image_file)
        return header + "plot " + ", \\\n".join(clauses) + "\n"

    def plot_clauses(self, series: StackedSeries, totals: Mapping[str, int]) -> list[str]:
        """
        Return one filled curve per root, largest first.

        Column 1 holds the date and root `i` lives in column `i + 2`. Each
        curve sums its own column and every smaller root's, so drawing the
        largest first leaves each band visible on top of the next.
        """
        column_count = len(series.ordered_roots)
        clauses: list[str] = []

        for index, root in enumerate(series.ordered_roots):
            columns = [f"${column}" for column in range(column_count + 1, index + 1, -1)]
            using = f"(({'+'.join(columns)})/1e6)"
            size_display = f"{totals.get(root, 0):.2e} bytes"

            clauses.append(
                f"'{self._paths.data_file}' using 1:{using}"
                f' with filledcurves x1 title "{root} {size_display}"'
            )

        return clauses

    @staticmethod
    def data_lines(series: StackedSeries) -> list[str]:
        """Return the tab separated data rows in ascending date order."""
        return [
            "\t".join([day.isoformat(), *(str(value) for value in values)]) + "\n"
            for day, values in series.rows()
        ]

    def _write(self, path: str, content: str) -> None:
        try:
            with open(path, "w") as file_out:
                file_out.write(content)

        except OSError as error:
            raise ReportError(f"Can't open {path} for writing: {error}") from error

        self.logger.debug("Wrote %d bytes to %s", len(content), path)
