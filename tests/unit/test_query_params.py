"""Tests for ASGI query parameter helpers."""

from datetime import datetime, timezone

import pytest

from logpile.adapters.frameworks.asgi import _parse_query_params
from logpile.adapters.frameworks.query_params import _parse_since_param


class TestParseSinceParam:
    """The 'since' parameter is a non-negative Unix timestamp."""

    @pytest.mark.asgi
    def test_valid_timestamp(self) -> None:
        """A Unix timestamp becomes an aware UTC datetime."""
        result = _parse_since_param({"since": ["1759492800"]})

        assert result == datetime(2025, 10, 3, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.asgi
    def test_missing_param(self) -> None:
        """A missing parameter gives None."""
        assert _parse_since_param({}) is None

    @pytest.mark.asgi
    @pytest.mark.parametrize("value", ["abc", "-1", "nan", "inf", "-inf", ""])
    def test_invalid_values_ignored(self, value: str) -> None:
        """Non-numeric, negative and non-finite values give None."""
        assert _parse_since_param({"since": [value]}) is None


class TestParseQueryParams:
    @pytest.mark.asgi
    def test_parses_query_string(self) -> None:
        """The query string is parsed into lists of values."""
        scope = {"query_string": b"since=10&x=1"}

        assert _parse_query_params(scope) == {"since": ["10"], "x": ["1"]}

    @pytest.mark.asgi
    def test_missing_query_string(self) -> None:
        """A scope without a query string gives an empty dict."""
        assert _parse_query_params({}) == {}
