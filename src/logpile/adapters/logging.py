"""Python logging setup for the logpile command line.

Diagnostics go to stderr so they never mix with the report on stdout.
Structured fields passed through ``extra=`` are rendered as ``key=value``.
"""

import logging
import sys
from typing import TextIO

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _format_value(value: object) -> str:
    text = str(value)
    if not text or any(ch.isspace() or ch in "\"=" for ch in text):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


class KeyValueFormatter(logging.Formatter):
    """Formatter that appends extra record attributes as ``key=value`` pairs.

    Example:
        ```python
        logger.debug("Could not timestamp matched line", extra={"line_number": 7})
        # DEBUG logpile.core.processor: Could not timestamp matched line line_number=7
        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = [
            f"{key}={_format_value(value)}"
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS
            and not key.startswith("_")
            and isinstance(value, (str, int, float, bool))
        ]
        if not extras:
            return base
        return f"{base} {' '.join(extras)}"


def configure_logging(verbose: bool = False, stream: TextIO | None = None) -> logging.Handler:
    """Install a stderr handler on the ``logpile`` logger.

    Args:
        verbose: DEBUG level when True, WARNING otherwise.
        stream: Target stream (default: ``sys.stderr``).

    Returns:
        The installed handler, replacing any handler from an earlier call.
    """
    logger = logging.getLogger("logpile")
    for handler in list(logger.handlers):
        if getattr(handler, "_logpile_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(KeyValueFormatter(DEFAULT_FORMAT))
    handler._logpile_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return handler
