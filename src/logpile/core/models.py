"""Core domain models for timestamp bucketing."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MICROSECOND = timedelta(microseconds=1)


def to_micros(instant: datetime) -> int:
    """Convert an aware datetime to integer microseconds since the Unix epoch."""
    return (instant - EPOCH) // MICROSECOND


def from_micros(micros: int) -> datetime:
    """Convert microseconds since the Unix epoch to an aware UTC datetime."""
    return EPOCH + timedelta(microseconds=micros)


@dataclass(frozen=True)
class Candidate:
    """A timestamp-shaped substring of a log line.

    Attributes:
        text: The matched substring.
        offset: Character offset of the match within the line.
        family: Name of the shape that matched (e.g. "iso", "syslog").
    """

    text: str
    offset: int
    family: str


@dataclass(frozen=True)
class BucketSize:
    """A bucket width in microseconds, or the unresolved "auto" marker.

    Attributes:
        micros: Positive width in microseconds, None for auto.
    """

    micros: int | None = None

    @property
    def is_auto(self) -> bool:
        return self.micros is None

    @property
    def seconds(self) -> float | None:
        if self.micros is None:
            return None
        return self.micros / 1_000_000

    def as_timedelta(self) -> timedelta | None:
        if self.micros is None:
            return None
        return timedelta(microseconds=self.micros)


@dataclass(frozen=True)
class Bucket:
    """One time bucket.

    Attributes:
        start: Aligned lower boundary of the bucket (UTC).
        count: Number of instants that fell into the bucket.
    """

    start: datetime
    count: int


@dataclass(frozen=True)
class TimeRange:
    """First and last instant observed across all timestamped matches."""

    first: datetime
    last: datetime

    @property
    def span(self) -> timedelta:
        return self.last - self.first


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of an aggregator.

    Attributes:
        buckets: Buckets in strictly ascending start order.
        time_range: Observed range, or None when nothing was timestamped.
        total: Number of instants observed and bucketed.
        bucket_size: Width used for ``buckets``, None when nothing to show.
        bucket_size_frozen: False while an auto size is still provisional.
    """

    buckets: tuple[Bucket, ...] = ()
    time_range: TimeRange | None = None
    total: int = 0
    bucket_size: timedelta | None = None
    bucket_size_frozen: bool = False

    @property
    def has_data(self) -> bool:
        return self.time_range is not None


class LineOutcome(Enum):
    """What happened to a single input line."""

    UNMATCHED = "unmatched"
    BUCKETED = "bucketed"
    NO_TIMESTAMP = "no_timestamp"
    UNPARSEABLE = "unparseable"


@dataclass
class LineStats:
    """Running counters for one processing session."""

    lines_seen: int = 0
    lines_matched: int = 0
    unparseable: int = 0
    no_timestamp: int = 0

    @property
    def bucketed(self) -> int:
        return self.lines_matched - self.unparseable - self.no_timestamp

    def record(self, outcome: LineOutcome) -> None:
        self.lines_seen += 1
        if outcome is LineOutcome.UNMATCHED:
            return
        self.lines_matched += 1
        if outcome is LineOutcome.UNPARSEABLE:
            self.unparseable += 1
        elif outcome is LineOutcome.NO_TIMESTAMP:
            self.no_timestamp += 1

    def as_dict(self) -> dict[str, int]:
        return {
            "lines_seen": self.lines_seen,
            "lines_matched": self.lines_matched,
            "bucketed": self.bucketed,
            "unparseable": self.unparseable,
            "no_timestamp": self.no_timestamp,
        }


@dataclass(frozen=True)
class Resolution:
    """A parsed instant together with the rule that produced it."""

    instant: datetime
    rule: str
    candidate: Candidate | None = field(default=None, compare=False)
