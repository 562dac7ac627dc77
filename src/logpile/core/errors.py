"""Exception types raised by the logpile core.

Per-line errors (``NoTimestampFound``, ``UnparseableTimestamp``) are caught by
the processing session and counted. The others abort a run.
"""


class LogpileError(Exception):
    """Base class for all logpile errors."""


class TimestampError(LogpileError):
    """A matched line could not be turned into an instant."""

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text


class NoTimestampFound(TimestampError):
    """The line contains nothing shaped like a timestamp."""


class UnparseableTimestamp(TimestampError):
    """A timestamp-shaped candidate was found but no format rule accepted it."""


class InvalidBucketSpec(LogpileError, ValueError):
    """The bucket token is neither "auto" nor a positive number of seconds."""


class EmptyRangeForAuto(LogpileError):
    """Auto bucket sizing was attempted before any instant was observed."""


class ConfigurationError(LogpileError):
    """Invalid or conflicting settings."""


class NoMatchesError(LogpileError):
    """Fail-fast mode saw zero matching lines once input was exhausted."""
