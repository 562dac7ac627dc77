"""Command-line entry point: ``logpile REGEX [FILES...]``."""

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from logpile.adapters.logging import configure_logging
from logpile.adapters.sources import FollowedFile, create_sources
from logpile.config import DEFAULT_POLL_INTERVAL, OutputFormat, Settings
from logpile.core.encoding import encode_csv, encode_json, encode_plot, encode_table
from logpile.core.errors import LogpileError, NoMatchesError
from logpile.core.models import LineStats, Snapshot
from logpile.core.processor import LogSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_MATCHES = 1
EXIT_ERROR = 2

CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logpile",
        description="Search logs by regex, bucket matches by time, and output summaries.",
        epilog="Default output is a table. Use -c, -j or -p to change the format.",
    )
    parser.add_argument("pattern", nargs="?", metavar="REGEX",
                        help="Regular expression to match in log lines")
    parser.add_argument("files", nargs="*", metavar="FILES",
                        help="Log files or glob patterns (.gz supported); stdin if omitted")

    output = parser.add_argument_group("output options")
    formats = output.add_mutually_exclusive_group()
    formats.add_argument("-c", "--csv", action="store_true", help="Output results in CSV format")
    formats.add_argument("-j", "--json", action="store_true", help="Output results in JSON format")
    formats.add_argument("-p", "--plot", action="store_true", help="Display results as an ASCII chart")
    output.add_argument("--no-headers", action="store_true",
                        help="Exclude column headers from CSV output")
    output.add_argument("--y-zero", action="store_true",
                        help="Start the count axis at zero in ASCII charts")

    processing = parser.add_argument_group("processing options")
    processing.add_argument("-t", "--time-format", metavar="FMT",
                            help='Custom strptime timestamp format, e.g. "%%Y-%%m-%%d %%H:%%M:%%S"')
    processing.add_argument("-b", "--bucket", metavar="SECONDS",
                            help='Bucket size in seconds, or "auto" (default: 60)')
    processing.add_argument("-g", "--grep", action="append", default=[], metavar="REGEX",
                            help="Additional pattern to match (repeatable)")
    processing.add_argument("-n", "--no-default-pattern", action="store_true",
                            help="Process all lines without requiring a search pattern")

    behavior = parser.add_argument_group("behavior options")
    behavior.add_argument("-f", "--follow", action="store_true",
                          help="Follow a log file and update the display in real time")
    behavior.add_argument("--interval", type=float, default=DEFAULT_POLL_INTERVAL,
                          metavar="SECONDS", help="Polling interval in follow mode (default: 1)")
    behavior.add_argument("-v", "--verbose", action="store_true",
                          help="Report lines whose timestamp could not be read")
    behavior.add_argument("-q", "--fail-quick", action="store_true",
                          help="Exit with status 1 if no line matched")
    return parser


def render(snapshot: Snapshot, stats: LineStats, settings: Settings) -> str:
    if settings.output is OutputFormat.CSV:
        return encode_csv(snapshot, headers=settings.headers)
    if settings.output is OutputFormat.JSON:
        return encode_json(snapshot, stats)
    if settings.output is OutputFormat.PLOT:
        return encode_plot(snapshot, y_zero=settings.y_zero)
    return encode_table(snapshot)


def run_batch(session: LogSession, out: TextIO) -> int:
    sources = create_sources(session.settings.files)
    try:
        snapshot = session.run(sources)
    except NoMatchesError as exc:
        logger.error("%s", exc)
        return EXIT_NO_MATCHES
    out.write(render(snapshot, session.stats, session.settings))
    return EXIT_OK


def run_follow(session: LogSession, out: TextIO) -> int:
    settings = session.settings
    source = FollowedFile(settings.files[0])
    live = settings.output in (OutputFormat.TABLE, OutputFormat.PLOT)

    def redraw(snapshot: Snapshot) -> None:
        out.write(CLEAR_SCREEN + render(snapshot, session.stats, settings))
        out.flush()

    print(f"Following: {source.name} (press Ctrl+C to stop)", file=sys.stderr)
    try:
        asyncio.run(session.follow(source, on_update=redraw if live else None))
    except KeyboardInterrupt:
        logger.info("Follow mode interrupted")
    if not live:
        out.write(render(session.snapshot(), session.stats, settings))
    return EXIT_OK


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    configure_logging(args.verbose)
    out = out or sys.stdout

    try:
        settings = Settings.from_namespace(args)
        session = LogSession(settings)
        if settings.follow:
            return run_follow(session, out)
        return run_batch(session, out)
    except (LogpileError, OSError) as exc:
        print(f"logpile: error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
