"""Bucket-size parsing and automatic bucket-size selection."""

import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from logpile.core.errors import EmptyRangeForAuto, InvalidBucketSpec
from logpile.core.models import BucketSize, TimeRange, to_micros

AUTO_TOKEN = "auto"
DEFAULT_BUCKET_SECONDS = 60
TARGET_BUCKETS = 30

_SECOND = 1_000_000
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_YEAR = 365 * _DAY

# Ascending "nice" widths in microseconds.
NICE_INTERVALS: tuple[int, ...] = (
    1 * _SECOND,
    5 * _SECOND,
    10 * _SECOND,
    15 * _SECOND,
    30 * _SECOND,
    1 * _MINUTE,
    5 * _MINUTE,
    10 * _MINUTE,
    15 * _MINUTE,
    30 * _MINUTE,
    1 * _HOUR,
    3 * _HOUR,
    6 * _HOUR,
    12 * _HOUR,
    1 * _DAY,
    7 * _DAY,
    30 * _DAY,
    _YEAR,
)

AUTO = BucketSize(None)

# Widest fixed bucket: the distance from the Unix epoch back to 0001-01-01
MAX_BUCKET_MICROS = -to_micros(datetime.min.replace(tzinfo=timezone.utc))


def parse_bucket_spec(token: str | float | None) -> BucketSize:
    """Parse a bucket-size token.

    Args:
        token: "auto" (any case), a positive number of seconds (fractions
            allowed, from one microsecond up to ``MAX_BUCKET_MICROS``), or None
            for the default.

    Returns:
        The parsed BucketSize.

    Raises:
        InvalidBucketSpec: If the token is neither "auto" nor a valid size.
    """
    if token is None:
        return BucketSize(DEFAULT_BUCKET_SECONDS * _SECOND)
    if isinstance(token, str) and token.strip().lower() == AUTO_TOKEN:
        return AUTO
    try:
        seconds = Decimal(str(token).strip())
    except InvalidOperation:
        raise InvalidBucketSpec(
            f"Invalid bucket size {token!r}: must be a number of seconds or 'auto'"
        ) from None
    if not seconds.is_finite() or seconds <= 0:
        raise InvalidBucketSpec(
            f"Invalid bucket size {token!r}: must be a positive number of seconds"
        )
    scaled = seconds * _SECOND
    if scaled < 1:
        raise InvalidBucketSpec(
            f"Invalid bucket size {token!r}: smallest bucket is one microsecond"
        )
    if scaled > MAX_BUCKET_MICROS:
        raise InvalidBucketSpec(
            f"Invalid bucket size {token!r}: largest bucket is "
            f"{MAX_BUCKET_MICROS // _SECOND} seconds"
        )
    return BucketSize(int(scaled.to_integral_value(rounding=ROUND_HALF_UP)))


def nice_interval(candidate_micros: float) -> int:
    """Smallest nice width that is at least ``candidate_micros``."""
    for width in NICE_INTERVALS:
        if width >= candidate_micros:
            return width
    return math.ceil(candidate_micros / _YEAR) * _YEAR


def select_bucket_size(spec: BucketSize, time_range: TimeRange | None) -> BucketSize:
    """Resolve ``spec`` to a fixed width.

    Fixed sizes are returned unchanged. Auto picks the nice width closest to
    ``span / TARGET_BUCKETS`` from above; a zero span gives the smallest one.

    Raises:
        EmptyRangeForAuto: If ``spec`` is auto and nothing has been observed.
    """
    if not spec.is_auto:
        return spec
    if time_range is None:
        raise EmptyRangeForAuto("Auto bucket size needs at least one timestamp")
    span = to_micros(time_range.last) - to_micros(time_range.first)
    if span <= 0:
        return BucketSize(NICE_INTERVALS[0])
    return BucketSize(nice_interval(span / TARGET_BUCKETS))


def bucket_start(micros: int, width: int) -> int:
    """Aligned start of the bucket containing ``micros``."""
    return (micros // width) * width
