"""Shared test fixtures for all test modules."""

import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

try:
    import httpx
except ImportError:
    httpx = None

from logpile.config import Settings
from logpile.core.buckets import parse_bucket_spec
from logpile.core.processor import LogSession

REFERENCE = datetime(2025, 10, 3, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def reference() -> datetime:
    """Reference instant used for year and date injection."""
    return REFERENCE


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns the shared reference instant."""
    return lambda: REFERENCE


@pytest.fixture
def log_file(tmp_path: Path) -> Callable[..., str]:
    """Factory fixture writing lines to a temporary log file.

    Usage:
        def test_something(log_file):
            path = log_file(["2025-10-03 12:00:00 ERROR boom"], name="app.log")
    """

    def _write(lines: list[str], name: str = "app.log") -> str:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def make_session(fixed_clock) -> Callable[..., LogSession]:
    """Factory fixture creating a LogSession pinned to the reference clock.

    Keyword arguments are passed to Settings; ``patterns`` may be given as
    strings and ``bucket`` as a bucket token.
    """

    def _session(
        patterns: list[str] | None = None, bucket: str | None = None, **kwargs
    ) -> LogSession:
        settings = Settings(
            patterns=[re.compile(p) for p in patterns or []],
            bucket=parse_bucket_spec(bucket),
            **kwargs,
        )
        return LogSession(settings, clock=fixed_clock)

    return _session


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(session)
            async with asgi_test_client(app) as client:
                response = await client.get("/buckets")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client


@pytest.fixture(autouse=True)
def reset_logpile_logger():
    """Undo configure_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger("logpile")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture.

    Returns a tuple of (send_func, responses_list) for recording ASGI messages.
    """

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses
