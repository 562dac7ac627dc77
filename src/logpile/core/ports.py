"""Port interfaces for line sources.

The processing session depends only on these protocols. Concrete readers
(plain files, gzip files, stdin, followed files) live in the adapters.
"""

from collections.abc import Iterator
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class LineSourcePort(Protocol):
    """A finite, named stream of text lines without trailing newlines.

    Examples: FileLineSource over a plain, gzip or stdin stream.
    """

    name: str

    def __iter__(self) -> Iterator[str]:
        """Iterate over the lines of the source."""
        ...


@runtime_checkable
class FollowSourcePort(Protocol):
    """A source that can be polled for lines appended since the last poll.

    Examples: FollowedFile.
    """

    name: str

    def read_new_lines(self) -> list[str]:
        """Return complete lines appended since the previous call."""
        ...


class ClockPort(Protocol):
    """Supplies the reference instant used for year and date injection."""

    def __call__(self) -> datetime:
        """Return the current reference instant (timezone-aware)."""
        ...
