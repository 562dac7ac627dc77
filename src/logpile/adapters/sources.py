"""Line source adapters implementing the core line-source ports."""

import glob
import gzip
import logging
import os
import sys
from collections.abc import Iterator
from typing import IO

logger = logging.getLogger(__name__)

STDIN_NAME = "-"
_GLOB_CHARS = frozenset("*?[")


def expand_paths(patterns: list[str]) -> list[str]:
    """Expand glob patterns in order, keeping literal paths untouched.

    A pattern that matches nothing is kept as-is so that opening it fails
    with a clear error instead of silently reading nothing.
    """
    paths: list[str] = []
    for pattern in patterns:
        if _GLOB_CHARS.intersection(pattern):
            matches = sorted(glob.glob(pattern))
            if matches:
                paths.extend(matches)
                continue
            logger.warning("Glob pattern matched no files", extra={"pattern": pattern})
        paths.append(pattern)
    return paths


def _open_text(path: str | None) -> IO[str]:
    if path is None or path == STDIN_NAME:
        return sys.stdin
    if path.endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8", errors="replace")
    return open(path, encoding="utf-8", errors="replace")


def open_lines(path: str | None) -> Iterator[str]:
    """Yield the lines of a plain, gzip or stdin stream without line endings."""
    stream = _open_text(path)
    try:
        for line in stream:
            yield line.rstrip("\r\n")
    finally:
        if stream is not sys.stdin:
            stream.close()


class FileLineSource:
    """Lines from a plain file, a gzip file (by ``.gz`` suffix) or stdin.

    Args:
        path: File path, or None / "-" for standard input.

    Raises:
        FileNotFoundError: If ``path`` does not name an existing file.
    """

    def __init__(self, path: str | None = None) -> None:
        if path not in (None, STDIN_NAME) and not os.path.isfile(path):
            raise FileNotFoundError(f"No such file: {path}")
        self.path = path
        self.name = path if path not in (None, STDIN_NAME) else "stdin"

    def __iter__(self) -> Iterator[str]:
        return open_lines(self.path)


def create_sources(patterns: list[str]) -> list[FileLineSource]:
    """One source per expanded path, or a single stdin source if none given."""
    if not patterns:
        return [FileLineSource(None)]
    return [FileLineSource(path) for path in expand_paths(patterns)]


class FollowedFile:
    """A plain file polled for appended lines, like ``tail -f``.

    The first poll returns the whole existing content. A trailing partial
    line is held back until its newline arrives. If the file shrinks it is
    assumed to have been truncated and is read again from the start.

    Args:
        path: Path of the file to follow.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """

    def __init__(self, path: str) -> None:
        if not os.path.isfile(path):
            raise FileNotFoundError(f"No such file: {path}")
        self.path = path
        self.name = path
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    def read_new_lines(self) -> list[str]:
        try:
            size = os.path.getsize(self.path)
        except FileNotFoundError:
            logger.warning("Followed file disappeared", extra={"path": self.path})
            return []
        if size < self._offset:
            logger.info("Followed file truncated, rereading", extra={"path": self.path})
            self._offset = 0
        if size == self._offset:
            return []

        with open(self.path, "rb") as handle:
            handle.seek(self._offset)
            data = handle.read(size - self._offset)

        complete, newline, _ = data.rpartition(b"\n")
        if not newline:
            return []
        self._offset += len(complete) + 1
        text = complete.decode("utf-8", errors="replace")
        return [line.rstrip("\r") for line in text.split("\n")]
