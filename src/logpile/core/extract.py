"""Candidate extraction: find the leftmost timestamp-shaped substring of a line.

Extraction only looks at shape. Whether the candidate is a real date is
decided later by the format rules, so "no timestamp at all" and "looks like a
timestamp but is not one" stay distinguishable.
"""

import re

from logpile.core.models import Candidate

TIME = r"\d{2}:\d{2}:\d{2}"
FRACTION = r"(?:[.,]\d{1,9})?"
MONTH_NAME = r"[A-Z][a-z]{2}"
RFC2822_ZONES = r"(?:[+-]\d{4}|GMT|UTC|UT|Z|[ECMP][SD]T)"

# One entry per format family. Order only matters for matches starting at the
# same offset; otherwise the earliest offset wins.
CANDIDATE_SHAPES: tuple[tuple[str, str], ...] = (
    ("epoch", r"^\d{10}(?:\.\d{1,9})?(?!\d)"),
    (
        "iso",
        r"(?<!\d)\d{4}[-/]\d{2}[-/]\d{2}[T ]"
        + TIME
        + FRACTION
        + r"(?:[zZ]\b|\s?[+-]\d{2}:?\d{2}\b)?",
    ),
    (
        "rfc2822",
        MONTH_NAME
        + r",\s+\d{1,2}\s+"
        + MONTH_NAME
        + r"\s+\d{4}\s+"
        + TIME
        + r"(?:\s+"
        + RFC2822_ZONES
        + r"\b)?",
    ),
    ("apache", r"\d{2}/" + MONTH_NAME + r"/\d{4}:" + TIME + r"(?:\s+[+-]\d{4})?"),
    ("slash_date", r"(?<!\d)\d{1,2}[/-]\d{1,2}[/-]\d{4}\s+" + TIME + FRACTION),
    ("syslog", r"(?<![A-Za-z])" + MONTH_NAME + r"\s+\d{1,2}\s+" + TIME + FRACTION),
    ("yearless_iso", r"(?<![\d-])\d{2}-\d{2}[T ]" + TIME + r"[.,]\d{1,9}"),
    ("time_only", r"(?<![\d:])" + TIME + FRACTION + r"(?![\d:])"),
)


def _compile_alternation(shapes: tuple[tuple[str, str], ...]) -> re.Pattern[str]:
    return re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in shapes))


class CandidateExtractor:
    """Finds the leftmost timestamp candidate in a line.

    Args:
        pattern: Alternation to search with. Defaults to the built-in shapes;
            a custom timestamp format supplies its own single-family pattern.
    """

    def __init__(self, pattern: re.Pattern[str] | None = None) -> None:
        self._pattern = pattern or DEFAULT_PATTERN

    @property
    def pattern(self) -> re.Pattern[str]:
        return self._pattern

    def extract(self, line: str) -> Candidate | None:
        """Return the leftmost candidate in ``line``, or None."""
        match = self._pattern.search(line)
        if match is None:
            return None
        return Candidate(
            text=match.group(0),
            offset=match.start(),
            family=match.lastgroup or "custom",
        )


DEFAULT_PATTERN = _compile_alternation(CANDIDATE_SHAPES)


def extract_candidate(line: str) -> Candidate | None:
    """Extract the leftmost built-in candidate from ``line``."""
    return _DEFAULT_EXTRACTOR.extract(line)


_DEFAULT_EXTRACTOR = CandidateExtractor()
