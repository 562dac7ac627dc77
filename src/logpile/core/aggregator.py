"""Time-bucket aggregation of observed instants."""

import logging
from collections import Counter
from datetime import datetime

from logpile.core.buckets import bucket_start, select_bucket_size
from logpile.core.errors import EmptyRangeForAuto
from logpile.core.formats import as_utc
from logpile.core.models import (
    Bucket,
    BucketSize,
    Snapshot,
    TimeRange,
    from_micros,
    to_micros,
)

logger = logging.getLogger(__name__)


class Aggregator:
    """Counts instants per time bucket and tracks the observed time range.

    A fixed bucket size is used from the first observation. An auto size is
    resolved once by ``resolve_bucket_size()`` and then frozen; until then
    instants are kept unbucketed so that the first resolution sees all of
    them.

    Args:
        spec: Bucket size from configuration, fixed or auto.
    """

    def __init__(self, spec: BucketSize) -> None:
        self._spec = spec
        self._resolved: BucketSize | None = None if spec.is_auto else spec
        self._counts: Counter[int] = Counter()
        self._pending: list[int] = []
        self._first: datetime | None = None
        self._last: datetime | None = None
        self._total = 0

    @property
    def spec(self) -> BucketSize:
        return self._spec

    @property
    def bucket_size(self) -> BucketSize | None:
        """The frozen bucket size, or None while auto is unresolved."""
        return self._resolved

    @property
    def is_resolved(self) -> bool:
        return self._resolved is not None

    @property
    def total(self) -> int:
        return self._total

    @property
    def time_range(self) -> TimeRange | None:
        if self._first is None or self._last is None:
            return None
        return TimeRange(self._first, self._last)

    def observe(self, instant: datetime) -> None:
        """Count ``instant`` in its bucket and extend the time range."""
        instant = as_utc(instant)
        if self._first is None or instant < self._first:
            self._first = instant
        if self._last is None or instant > self._last:
            self._last = instant
        self._total += 1

        micros = to_micros(instant)
        if self._resolved is None:
            self._pending.append(micros)
        else:
            self._counts[bucket_start(micros, self._width(self._resolved))] += 1

    def resolve_bucket_size(self) -> BucketSize | None:
        """Freeze the bucket size if it is not frozen yet.

        Returns:
            The frozen size, or None when auto sizing has to wait for data.
        """
        if self._resolved is not None:
            return self._resolved
        try:
            resolved = select_bucket_size(self._spec, self.time_range)
        except EmptyRangeForAuto:
            logger.debug("Auto bucket size deferred: no timestamps observed yet")
            return None

        width = self._width(resolved)
        for micros in self._pending:
            self._counts[bucket_start(micros, width)] += 1
        self._pending.clear()
        self._resolved = resolved
        logger.debug(
            "Auto bucket size resolved",
            extra={"bucket_seconds": resolved.seconds, "observed": self._total},
        )
        return resolved

    def snapshot(self) -> Snapshot:
        """Return the ascending buckets, time range and total.

        Does not change any state. While an auto size is unresolved, pending
        instants are shown with the size a resolution would pick right now.
        """
        time_range = self.time_range
        if self._resolved is not None:
            size, counts = self._resolved, self._counts
        elif time_range is not None:
            size = select_bucket_size(self._spec, time_range)
            width = self._width(size)
            counts = Counter(bucket_start(micros, width) for micros in self._pending)
        else:
            return Snapshot()

        buckets = tuple(
            Bucket(start=from_micros(start), count=count)
            for start, count in sorted(counts.items())
        )
        return Snapshot(
            buckets=buckets,
            time_range=time_range,
            total=self._total,
            bucket_size=size.as_timedelta(),
            bucket_size_frozen=self._resolved is not None,
        )

    @staticmethod
    def _width(size: BucketSize) -> int:
        assert size.micros is not None
        return size.micros
