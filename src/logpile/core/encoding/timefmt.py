"""Shared timestamp and duration formatting for renderers."""

from datetime import datetime, timedelta


def format_seconds(size: timedelta | None) -> str:
    """Bucket width in seconds without a trailing ``.0`` for whole seconds."""
    if size is None:
        return "-"
    seconds = size.total_seconds()
    if seconds == int(seconds):
        return str(int(seconds))
    return f"{seconds:g}"


def format_bucket_start(start: datetime, size: timedelta | None) -> str:
    """Human-readable bucket start; sub-second widths keep milliseconds."""
    if size is not None and size < timedelta(seconds=1):
        return start.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    return start.strftime("%Y-%m-%d %H:%M:%S")


def rfc3339(instant: datetime) -> str:
    """RFC 3339 text with a ``Z`` suffix for UTC instants."""
    return instant.isoformat().replace("+00:00", "Z")
