"""Query parameter parsing for the snapshot endpoints."""

import math
from datetime import datetime, timezone


def _parse_since_param(params: dict[str, list[str]]) -> datetime | None:
    """Parse and validate the 'since' query parameter.

    Args:
        params: Parsed query string parameters (as returned by urllib.parse.parse_qs).

    Returns:
        UTC instant for a Unix timestamp in seconds, or None if missing or
        invalid. Negative, NaN and infinite values are rejected.
    """
    try:
        value = float(params.get("since", [""])[0])
    except ValueError:
        return None
    if value < 0 or math.isnan(value) or math.isinf(value):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
