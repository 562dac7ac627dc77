"""Processing session: match, timestamp and bucket log lines."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from logpile.config import Settings
from logpile.core.aggregator import Aggregator
from logpile.core.errors import NoMatchesError, NoTimestampFound, UnparseableTimestamp
from logpile.core.formats import TimestampParser
from logpile.core.models import LineOutcome, LineStats, Snapshot
from logpile.core.ports import ClockPort, FollowSourcePort, LineSourcePort

logger = logging.getLogger(__name__)

# Characters of an offending line included in failure logs
_PREVIEW_CHARS = 80


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LogSession:
    """Owns the aggregation state for one batch run or one follow session.

    Lines are processed strictly one at a time. Per-line failures are counted
    and logged but never abort the run or touch the buckets.

    Args:
        settings: Validated run settings.
        clock: Supplier of the reference instant for partial timestamps.
            Defaults to the current UTC time.
    """

    def __init__(self, settings: Settings, clock: ClockPort | None = None) -> None:
        self.settings = settings
        self._clock = clock or utc_now
        self._parser = TimestampParser(settings.time_format)
        self._aggregator = Aggregator(settings.bucket)
        self._stats = LineStats()

    @property
    def stats(self) -> LineStats:
        return self._stats

    @property
    def aggregator(self) -> Aggregator:
        return self._aggregator

    def matches(self, line: str) -> bool:
        """True if any pattern matches, or if there are no patterns."""
        if not self.settings.patterns:
            return True
        return any(pattern.search(line) for pattern in self.settings.patterns)

    def process_line(self, line: str) -> LineOutcome:
        """Process one line and record its outcome."""
        line_number = self._stats.lines_seen + 1
        if not self.matches(line):
            outcome = LineOutcome.UNMATCHED
        else:
            try:
                resolution = self._parser.parse_line(line, self._clock())
            except NoTimestampFound:
                outcome = LineOutcome.NO_TIMESTAMP
                self._log_failure(outcome, line_number, line)
            except UnparseableTimestamp:
                outcome = LineOutcome.UNPARSEABLE
                self._log_failure(outcome, line_number, line)
            else:
                self._aggregator.observe(resolution.instant)
                outcome = LineOutcome.BUCKETED
        self._stats.record(outcome)
        return outcome

    def process_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.process_line(line)

    def run(self, sources: Iterable[LineSourcePort]) -> Snapshot:
        """Process every source in order, then finish the batch.

        Raises:
            NoMatchesError: In fail-fast mode when no line matched.
        """
        for source in sources:
            logger.info("Processing source", extra={"source": source.name})
            self.process_lines(source)
        return self.finish()

    def finish(self) -> Snapshot:
        """Freeze the bucket size, report counts and apply fail-fast."""
        self._aggregator.resolve_bucket_size()
        self._log_summary()
        if self.settings.fail_fast and self._stats.lines_matched == 0:
            raise NoMatchesError(
                f"No lines matched out of {self._stats.lines_seen} read"
            )
        return self.snapshot()

    def snapshot(self) -> Snapshot:
        return self._aggregator.snapshot()

    async def follow(
        self,
        source: FollowSourcePort,
        on_update: Callable[[Snapshot], None] | None = None,
        stop: asyncio.Event | None = None,
    ) -> Snapshot:
        """Poll ``source`` until ``stop`` is set.

        After every poll that produced lines the bucket size is resolved (an
        auto size is frozen the first time data is available) and
        ``on_update`` receives a fresh snapshot. The only suspension point is
        the wait between polls, so cancellation never interrupts a line.

        Returns:
            The snapshot at the time ``stop`` was observed.
        """
        logger.info(
            "Following source",
            extra={"source": source.name, "interval": self.settings.poll_interval},
        )
        while True:
            lines = source.read_new_lines()
            if lines:
                self.process_lines(lines)
                self._aggregator.resolve_bucket_size()
                if on_update is not None:
                    on_update(self.snapshot())
            if stop is not None and stop.is_set():
                break
            await asyncio.sleep(self.settings.poll_interval)
        self._log_summary()
        return self.snapshot()

    def _log_failure(self, outcome: LineOutcome, line_number: int, line: str) -> None:
        logger.debug(
            "Could not timestamp matched line",
            extra={
                "reason": outcome.value,
                "line_number": line_number,
                "line": line[:_PREVIEW_CHARS],
            },
        )

    def _log_summary(self) -> None:
        if not self.settings.verbose:
            return
        stats = self._stats
        logger.info(
            "Processed %d lines: %d matched, %d bucketed, %d unparseable, %d without timestamp",
            stats.lines_seen,
            stats.lines_matched,
            stats.bucketed,
            stats.unparseable,
            stats.no_timestamp,
        )
