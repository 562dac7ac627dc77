"""Plain-text table renderer."""

from logpile.core.encoding.timefmt import format_bucket_start, format_seconds
from logpile.core.models import Snapshot

_TS_WIDTH = 30
_COUNT_WIDTH = 10


def encode_table(snapshot: Snapshot) -> str:
    """Render buckets as an aligned two-column table with a total row.

    Returns:
        Table text ending with a newline, or "No matches found." when the
        snapshot has no buckets.
    """
    if not snapshot.buckets:
        return "No matches found.\n"

    rule = f"{'':-^{_TS_WIDTH}}-+-{'':-^{_COUNT_WIDTH}}"
    lines = [
        "",
        f"{'Timestamp':^{_TS_WIDTH}} | {'Count':>{_COUNT_WIDTH}}",
        rule,
    ]
    for bucket in snapshot.buckets:
        label = format_bucket_start(bucket.start, snapshot.bucket_size)
        lines.append(f"{label:{_TS_WIDTH}} | {bucket.count:>{_COUNT_WIDTH}}")
    lines.append(rule)
    lines.append(f"{'Total':{_TS_WIDTH}} | {snapshot.total:>{_COUNT_WIDTH}}")
    lines.append("")
    lines.append(f"Bucket size: {format_seconds(snapshot.bucket_size)} seconds")
    return "\n".join(lines) + "\n"
