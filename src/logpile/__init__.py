"""logpile: search logs by regex and count matches per time bucket."""

from logpile.config import OutputFormat, Settings
from logpile.core.aggregator import Aggregator
from logpile.core.buckets import parse_bucket_spec, select_bucket_size
from logpile.core.errors import (
    ConfigurationError,
    EmptyRangeForAuto,
    InvalidBucketSpec,
    LogpileError,
    NoMatchesError,
    NoTimestampFound,
    UnparseableTimestamp,
)
from logpile.core.extract import extract_candidate
from logpile.core.formats import TimestampParser, resolve
from logpile.core.processor import LogSession

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "ConfigurationError",
    "EmptyRangeForAuto",
    "InvalidBucketSpec",
    "LogSession",
    "LogpileError",
    "NoMatchesError",
    "NoTimestampFound",
    "OutputFormat",
    "Settings",
    "TimestampParser",
    "UnparseableTimestamp",
    "extract_candidate",
    "parse_bucket_spec",
    "resolve",
    "select_bucket_size",
]
