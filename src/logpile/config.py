"""Validated run settings.

Everything that can fail (bucket token, regexes, custom time format, option
combinations) is checked here, before any input line is read.
"""

import argparse
import re
from dataclasses import dataclass, field
from enum import Enum

from logpile.core.buckets import parse_bucket_spec
from logpile.core.errors import ConfigurationError
from logpile.core.formats import custom_rule
from logpile.core.models import BucketSize

DEFAULT_POLL_INTERVAL = 1.0


class OutputFormat(Enum):
    TABLE = "table"
    CSV = "csv"
    JSON = "json"
    PLOT = "plot"


def compile_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    """Compile match patterns, reporting the first invalid one."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigurationError(f"Invalid regex {pattern!r}: {exc}") from exc
    return compiled


@dataclass
class Settings:
    """Configuration for one processing session.

    Attributes:
        patterns: Compiled match patterns; a line matches if any does. An
            empty list matches every line.
        bucket: Fixed bucket size or auto.
        time_format: Optional ``strptime`` format overriding auto-detection.
        files: Input paths or glob patterns; empty means stdin.
        follow: Poll the single input file for appended lines.
        fail_fast: Treat zero matched lines as fatal once input is exhausted.
        verbose: Log per-line failures and per-kind counts.
        output: Renderer for the final (or live) report.
        headers: Include the CSV header row.
        y_zero: Start the plot's count axis at zero.
        poll_interval: Seconds between polls in follow mode.
    """

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    bucket: BucketSize = field(default_factory=lambda: parse_bucket_spec(None))
    time_format: str | None = None
    files: list[str] = field(default_factory=list)
    follow: bool = False
    fail_fast: bool = False
    verbose: bool = False
    output: OutputFormat = OutputFormat.TABLE
    headers: bool = True
    y_zero: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.time_format:
            custom_rule(self.time_format)
        if self.poll_interval <= 0:
            raise ConfigurationError("Poll interval must be positive")

    @classmethod
    def from_namespace(cls, args: argparse.Namespace) -> "Settings":
        """Build settings from parsed command-line arguments.

        With ``--no-default-pattern`` the positional REGEX slot holds the
        first file instead of a pattern.

        Raises:
            ConfigurationError: On invalid regexes, formats or combinations.
            InvalidBucketSpec: On an invalid bucket token.
        """
        bucket = parse_bucket_spec(args.bucket)

        files = list(args.files)
        raw_patterns: list[str] = []
        if args.no_default_pattern:
            if args.pattern is not None:
                files.insert(0, args.pattern)
        elif args.pattern is None:
            raise ConfigurationError(
                "REGEX pattern is required unless --no-default-pattern is set"
            )
        else:
            raw_patterns.append(args.pattern)
        raw_patterns.extend(args.grep or [])
        if args.follow and len(files) != 1:
            raise ConfigurationError("Follow mode requires exactly one file argument")

        if args.csv:
            output = OutputFormat.CSV
        elif args.json:
            output = OutputFormat.JSON
        elif args.plot:
            output = OutputFormat.PLOT
        else:
            output = OutputFormat.TABLE
        if args.no_headers and output is not OutputFormat.CSV:
            raise ConfigurationError("--no-headers requires --csv")
        if args.y_zero and output is not OutputFormat.PLOT:
            raise ConfigurationError("--y-zero requires --plot")

        return cls(
            patterns=compile_patterns(raw_patterns),
            bucket=bucket,
            time_format=args.time_format,
            files=files,
            follow=args.follow,
            fail_fast=args.fail_quick,
            verbose=args.verbose,
            output=output,
            headers=not args.no_headers,
            y_zero=args.y_zero,
            poll_interval=args.interval,
        )
