from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from stack_graph.graphconfig import StackGraphConfig
from stack_graph.graphconfig import write_new_config
from stack_graph.graphemitter import ReportError
from stack_graph.graphmodel import ReportPaths
from stack_graph.stackgraph import StackGraph

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("stack_graph")


class _ArgumentParser(argparse.ArgumentParser):
    """Exit with status 1 on invalid options."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = _ArgumentParser(
        prog="stack_graph",
        description=(
            "Draw stack graphs of file sizes going back in time. At any date the "
            "graph shows the space used if every older file were deleted."
        ),
    )
    parser.add_argument(
        "directories",
        nargs="*",
        help="The directories to analyze.",
    )
    parser.add_argument(
        "--output-base-dir",
        help="Base directory under which a timestamped run directory is created.",
    )
    parser.add_argument(
        "--output-dir",
        help="Write into this directory. Overrides --output-base-dir.",
    )
    parser.add_argument(
        "--max-age",
        type=int,
        help="The maximum age in seconds of files to include.",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        help="Regular expression matched against full paths. Can be repeated.",
    )
    parser.add_argument(
        "--label-files",
        help="A label inserted into the output file names.",
    )
    parser.add_argument(
        "--follow",
        help="Follow symbolic links. Excluded directories are walked but not counted.",
        default=None,
        action="store_true",
    )
    parser.add_argument(
        "--run-id",
        help="Unique identifier for this run. Default: a random token.",
    )
    parser.add_argument(
        "--config",
        help="Read default options from this configuration file.",
    )
    parser.add_argument(
        "--make-config",
        help="Create a default configuration file at --config and exit.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log-file",
        help="Enable logging to a file in the run output directory.",
        default=False,
        action="store_true",
    )
    parsed = parser.parse_args(args)

    if parsed.make_config and not parsed.config:
        parser.error("--make-config requires --config")

    return parsed


def add_file_handler_to_logging(paths: ReportPaths) -> None:
    """Add a file handler to the root logger inside the run directory."""
    file_handler = logging.FileHandler(paths.log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)


def print_summary(paths: ReportPaths) -> None:
    print(f"Run output dir: {paths.run_directory}")
    print(f"Gnuplot control file: {paths.control_file}")
    print(f"Gnuplot data file: {paths.data_file}")
    print(f"Gnuplot output file: {paths.image_file}")


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.make_config:
        write_new_config(args.config)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    try:
        config = StackGraphConfig.from_args(args)
    except ValueError as error:
        logger.error("%s", error)
        return 1

    if not config.directories:
        logger.warning("No directories given...")
        return 1

    try:
        graph = StackGraph(config)

        if args.log_file:
            graph.make_run_directory()
            add_file_handler_to_logging(graph.paths)

        paths = graph.run()

    except ReportError as error:
        logger.error("%s", error)
        return 2

    print_summary(paths)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
