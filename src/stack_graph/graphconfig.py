from __future__ import annotations

import argparse
import logging
import os
import re
import uuid
from configparser import ConfigParser

SECTION = "stack_graph"
DEFAULT_OUTPUT_BASE_DIR = "/tmp/file_size_stack_graph"
DEFAULT_LABEL = "BLANK_LABEL"

NEW_CONFIG = """\
[stack_graph]
# Directories to analyze, one per line. Directories given on the command
# line replace this list.
directories =

# A timestamped run directory is created under output_base_dir.
# Set output_dir to write into a fixed directory instead.
output_base_dir = {output_base_dir}

# Label inserted into the output file names.
label_files = {label}

# Files modified more than this many seconds ago are ignored. 0 disables.
max_age_seconds = 0

# Follow symbolic links. Excluded directories are no longer pruned before
# they are walked, but their contents are still excluded.
follow = false

# Exclude files and directories from the totals.
# The following are regular expressions and are matched against the full path.
# Multiline values are one expression per line.
exclude =
    \\.snapshot

    """


class StackGraphConfig:
    """Configuration for a StackGraph run."""

    logger = logging.getLogger(__name__)

    def __init__(self, filepath: str | None = None, *, run_id: str | None = None) -> None:
        """
        Load the configuration from the given file, if any.

        Keyword Args:
            run_id: A unique identifier for this run, used in output names.
                A random token is generated when not given.

        Raises:
            ValueError: When a config file is given but cannot be read.
        """
        self._config = ConfigParser(interpolation=None)
        self._config.add_section(SECTION)
        self._run_id = run_id or uuid.uuid4().hex[:8]
        self._lists: dict[str, list[str]] = {}

        if filepath is not None:
            success = self._config.read(filepath)

            if not success:
                raise ValueError(f"Could not read config file at {filepath}")

            self.logger.debug("Loaded config from %s", filepath)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> StackGraphConfig:
        """
        Build a config from parsed command line arguments.

        Options given on the command line override the config file.

        Raises:
            ValueError: When the resulting configuration is invalid.
        """
        config = cls(args.config, run_id=args.run_id)
        config.set_options(
            directories=args.directories or None,
            output_base_dir=args.output_base_dir,
            output_dir=args.output_dir,
            max_age_seconds=args.max_age,
            exclude=args.exclude,
            label_files=args.label_files,
            follow=args.follow,
        )
        config.validate()
        return config

    def set_options(self, **options: str | int | bool | list[str] | None) -> None:
        """
        Override config values. Options that are None are left untouched.

        Lists are kept item for item, so values are not stripped or dropped.
        """
        for key, value in options.items():
            if value is None:
                continue

            if isinstance(value, list):
                self._lists[key] = list(value)
                continue

            self._lists.pop(key, None)
            if isinstance(value, bool):
                value = "true" if value else "false"

            self._config.set(SECTION, key, str(value))

    def validate(self) -> None:
        """
        Raise ValueError for settings that would fail later in the run.

        Raises:
            ValueError
        """
        if self.output_dir == "":
            raise ValueError("--output-dir was specified, but was empty")

        self._compile_patterns()

        for option, getter in (
            ("max_age_seconds", self._config.getint),
            ("follow", self._config.getboolean),
        ):
            try:
                getter(SECTION, option, fallback=None)
            except ValueError as error:
                raise ValueError(f"Invalid value for {option}: {error}") from error

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def directories(self) -> list[str]:
        """Return the directories to analyze, in the given order."""
        return self._get_lines("directories")

    @property
    def output_base_dir(self) -> str:
        """Return the base directory for timestamped run directories."""
        return self._config.get(SECTION, "output_base_dir", fallback="") or (
            DEFAULT_OUTPUT_BASE_DIR
        )

    @property
    def output_dir(self) -> str | None:
        """Return the explicit run directory, or None if not set."""
        return self._config.get(SECTION, "output_dir", fallback=None)

    @property
    def max_age_seconds(self) -> int | None:
        """Return the file age cutoff in seconds, or None for no cutoff."""
        return self._config.getint(SECTION, "max_age_seconds", fallback=0) or None

    @property
    def follow(self) -> bool:
        """Return whether symbolic links are followed."""
        return self._config.getboolean(SECTION, "follow", fallback=False)

    @property
    def label_files(self) -> str:
        """Return the user label for output files."""
        return self._config.get(SECTION, "label_files", fallback="") or DEFAULT_LABEL

    @property
    def file_label(self) -> str:
        """Return the label used in output names, prefixed by the run id."""
        return f"{self.run_id}-{self.label_files}"

    @property
    def exclude_patterns(self) -> list[re.Pattern[str]]:
        """
        Return the compiled exclusion patterns.

        Raises:
            ValueError: When a pattern is not a valid regular expression.
        """
        return self._compile_patterns()

    def _compile_patterns(self) -> list[re.Pattern[str]]:
        patterns: list[re.Pattern[str]] = []
        for line in self._get_lines("exclude"):
            try:
                patterns.append(re.compile(line))
            except re.error as error:
                raise ValueError(f"Invalid exclude pattern '{line}': {error}") from error

        return patterns

    def run_directory(self, timestamp: str) -> str:
        """
        Return the directory the run writes into.

        Raises:
            ValueError: When an empty output directory was configured.
        """
        output_dir = self.output_dir
        if output_dir is None:
            return os.path.join(self.output_base_dir, f"{timestamp}-{self.file_label}")

        if not output_dir:
            raise ValueError("--output-dir was specified, but was empty")

        return output_dir

    def _get_lines(self, option: str) -> list[str]:
        if option in self._lists:
            return list(self._lists[option])

        config_line = self._config.get(SECTION, option, fallback="")
        return [line.strip() for line in config_line.splitlines() if line.strip()]


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    config = NEW_CONFIG.format(
        output_base_dir=DEFAULT_OUTPUT_BASE_DIR,
        label=DEFAULT_LABEL,
    )

    with open(filename, "w") as config_file:
        config_file.write(config)
