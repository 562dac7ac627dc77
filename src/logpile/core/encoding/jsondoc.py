"""JSON report encoder."""

import json
from datetime import datetime
from typing import Any

from logpile.core.encoding.timefmt import rfc3339
from logpile.core.models import LineStats, Snapshot


def snapshot_document(
    snapshot: Snapshot,
    stats: LineStats | None = None,
    since: datetime | None = None,
) -> dict[str, Any]:
    """Build the JSON-serialisable report for a snapshot.

    Args:
        snapshot: Snapshot to report.
        stats: Optional line counters, added under ``"lines"``.
        since: Only include buckets starting strictly after this instant.

    Returns:
        Dict with ``buckets``, ``total_matches``, ``bucket_size_seconds`` and
        ``time_range`` (None when there were no timestamped matches).
    """
    buckets = [
        {"timestamp": rfc3339(bucket.start), "count": bucket.count}
        for bucket in snapshot.buckets
        if since is None or bucket.start > since
    ]
    time_range = None
    if snapshot.time_range is not None:
        time_range = {
            "start": rfc3339(snapshot.time_range.first),
            "end": rfc3339(snapshot.time_range.last),
        }
    size = snapshot.bucket_size
    document: dict[str, Any] = {
        "buckets": buckets,
        "total_matches": snapshot.total,
        "bucket_size_seconds": size.total_seconds() if size is not None else None,
        "time_range": time_range,
    }
    if stats is not None:
        document["lines"] = stats.as_dict()
    return document


def encode_json(snapshot: Snapshot, stats: LineStats | None = None) -> str:
    """Encode a snapshot as pretty-printed JSON ending with a newline."""
    return json.dumps(snapshot_document(snapshot, stats), indent=2) + "\n"
