"""CSV renderer."""

import csv
import io

from logpile.core.encoding.timefmt import rfc3339
from logpile.core.models import Snapshot


def encode_csv(snapshot: Snapshot, headers: bool = True) -> str:
    """Encode buckets as ``timestamp,count`` rows.

    Args:
        snapshot: Snapshot to encode.
        headers: Emit the header row (default: True).

    Returns:
        CSV text. Only the header row (or an empty string) when there are no
        buckets.
    """
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    if headers:
        writer.writerow(["timestamp", "count"])
    for bucket in snapshot.buckets:
        writer.writerow([rfc3339(bucket.start), bucket.count])
    return out.getvalue()
