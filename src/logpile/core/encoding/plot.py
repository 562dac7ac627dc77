"""ASCII bar-chart renderer for terminals."""

from logpile.core.encoding.timefmt import format_bucket_start, format_seconds
from logpile.core.models import Snapshot

DEFAULT_WIDTH = 60
_BAR = "#"


def encode_plot(snapshot: Snapshot, y_zero: bool = False, width: int = DEFAULT_WIDTH) -> str:
    """Draw one horizontal bar per bucket.

    Bars are scaled between the smallest and the largest count, or between
    zero and the largest count when ``y_zero`` is set. Every non-empty bucket
    gets at least one bar character.

    Returns:
        Chart text, or "No data to plot." when there are no buckets.
    """
    if not snapshot.buckets:
        return "No data to plot.\n"

    counts = [bucket.count for bucket in snapshot.buckets]
    high = max(counts)
    low = 0 if y_zero else int(min(counts) * 0.9)
    scale = (width - 1) / (high - low) if high > low else 0.0

    labels = [format_bucket_start(b.start, snapshot.bucket_size) for b in snapshot.buckets]
    label_width = max(len(label) for label in labels)
    count_width = len(str(high))

    lines = []
    for label, count in zip(labels, counts):
        length = 1 + round((count - low) * scale) if scale else width
        lines.append(f"{label:<{label_width}} | {count:>{count_width}} {_BAR * length}")

    first, last = snapshot.buckets[0].start, snapshot.buckets[-1].start
    lines.append("")
    lines.append(
        f"{len(counts)} buckets of {format_seconds(snapshot.bucket_size)}s "
        f"from {first:%Y-%m-%d %H:%M:%S} to {last:%Y-%m-%d %H:%M:%S}, "
        f"{snapshot.total} matches, peak {high}"
    )
    return "\n".join(lines) + "\n"
