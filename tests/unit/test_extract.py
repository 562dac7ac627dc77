"""Tests for timestamp candidate extraction."""

import re

import pytest

from logpile.core.extract import CandidateExtractor, extract_candidate


class TestCandidateShapes:
    """Each timestamp family is recognised by shape alone."""

    @pytest.mark.core
    @pytest.mark.parametrize(
        ("line", "text", "family"),
        [
            ("1727962496 worker started", "1727962496", "epoch"),
            ("1727962496.125 worker started", "1727962496.125", "epoch"),
            ("2025-10-03T12:34:56.789Z ERROR boom", "2025-10-03T12:34:56.789Z", "iso"),
            ("at 2025-10-03 12:34:56 +02:00 done", "2025-10-03 12:34:56 +02:00", "iso"),
            ("2025/10/03 12:34:56 INFO ok", "2025/10/03 12:34:56", "iso"),
            (
                "Date: Fri, 03 Oct 2025 12:34:56 +0000 sent",
                "Fri, 03 Oct 2025 12:34:56 +0000",
                "rfc2822",
            ),
            (
                '127.0.0.1 - - [03/Oct/2025:12:34:56 +0000] "GET / HTTP/1.1"',
                "03/Oct/2025:12:34:56 +0000",
                "apache",
            ),
            ("03/10/2025 12:34:56 WARN", "03/10/2025 12:34:56", "slash_date"),
            ("Oct  3 12:34:56 host sshd[1]: ok", "Oct  3 12:34:56", "syslog"),
            ("10-03 12:34:56.789 I/ActivityManager", "10-03 12:34:56.789", "yearless_iso"),
            ("[12:34:56] job done", "12:34:56", "time_only"),
        ],
    )
    def test_family_is_detected(self, line: str, text: str, family: str) -> None:
        """Representative lines yield the expected substring and family."""
        candidate = extract_candidate(line)

        assert candidate is not None
        assert candidate.text == text
        assert candidate.family == family
        assert line[candidate.offset :].startswith(text)

    @pytest.mark.core
    def test_line_without_timestamp_yields_nothing(self) -> None:
        """A line with no timestamp-shaped text has no candidate."""
        assert extract_candidate("ERROR connection refused") is None

    @pytest.mark.core
    def test_empty_line_yields_nothing(self) -> None:
        """An empty line has no candidate."""
        assert extract_candidate("") is None

    @pytest.mark.core
    def test_epoch_only_at_line_start(self) -> None:
        """Ten-digit numbers inside a line are ids, not timestamps."""
        assert extract_candidate("request 1727962496 failed") is None

    @pytest.mark.core
    def test_longer_digit_run_is_not_epoch(self) -> None:
        """An eleven-digit run is not taken as epoch seconds."""
        assert extract_candidate("17279624961 bytes") is None

    @pytest.mark.core
    def test_invalid_month_still_extracted(self) -> None:
        """Shape matching does not validate the calendar."""
        candidate = extract_candidate("2025-13-45T12:34:56Z oops")

        assert candidate is not None
        assert candidate.text == "2025-13-45T12:34:56Z"


class TestLeftmostCandidate:
    """The earliest starting offset wins regardless of family."""

    @pytest.mark.core
    def test_time_only_before_full_timestamp(self) -> None:
        """A bare time earlier in the line beats a later complete timestamp."""
        candidate = extract_candidate("12:00:01 replay of 2025-10-03T12:34:56Z")

        assert candidate is not None
        assert candidate.text == "12:00:01"
        assert candidate.offset == 0

    @pytest.mark.core
    def test_first_of_two_iso_timestamps(self) -> None:
        """Of two ISO timestamps the first one is returned."""
        line = "from 2025-10-01T00:00:00Z to 2025-10-03T00:00:00Z"

        candidate = extract_candidate(line)

        assert candidate is not None
        assert candidate.text == "2025-10-01T00:00:00Z"
        assert candidate.offset == 5


class TestCustomPattern:
    """A custom pattern replaces the built-in shapes entirely."""

    @pytest.mark.core
    def test_custom_pattern_family(self) -> None:
        """Custom patterns report the "custom" family."""
        extractor = CandidateExtractor(re.compile(r"(?P<custom>\d{8}-\d{6})"))

        candidate = extractor.extract("job 20251003-123456 ok")

        assert candidate is not None
        assert candidate.text == "20251003-123456"
        assert candidate.family == "custom"

    @pytest.mark.core
    def test_custom_pattern_ignores_builtin_shapes(self) -> None:
        """Built-in shapes are not searched when a custom pattern is set."""
        extractor = CandidateExtractor(re.compile(r"(?P<custom>\d{8}-\d{6})"))

        assert extractor.extract("2025-10-03T12:34:56Z no match") is None
