"""Format resolution: turn a timestamp candidate into an absolute instant.

Rules are tried in the fixed order of ``FORMAT_RULES`` and the first one that
parses wins. Rules for partial timestamps (no year, or no date at all) take
the missing fields from an explicit reference instant, never from the clock.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from email.utils import parsedate_to_datetime
from functools import lru_cache

from logpile.core.errors import (
    ConfigurationError,
    NoTimestampFound,
    UnparseableTimestamp,
)
from logpile.core.extract import CandidateExtractor
from logpile.core.models import EPOCH, Resolution

MONTHS = {
    name: number
    for number, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun",
         "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}

EPOCH_MIN = 1_000_000_000
EPOCH_MAX = 9_999_999_999

_T = r"(?P<H>\d{2}):(?P<M>\d{2}):(?P<S>\d{2})(?:[.,](?P<frac>\d{1,9}))?"
_YMD = r"(?P<y>\d{4})-(?P<mo>\d{2})-(?P<d>\d{2})"

Parser = Callable[[re.Match[str], datetime], datetime]


@dataclass(frozen=True)
class FormatRule:
    """One recognised timestamp encoding.

    Attributes:
        name: Rule identifier reported alongside parsed instants.
        pattern: Regex the whole candidate must match.
        parse: Builds the UTC instant from the match and a reference instant.
            Raises ValueError when the fields do not form a valid instant.
        injects_date: True when the rule fills in a missing year or date.
    """

    name: str
    pattern: re.Pattern[str]
    parse: Parser
    injects_date: bool = False


def as_utc(value: datetime) -> datetime:
    """Normalise a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _micros(fraction: str | None) -> int:
    if not fraction:
        return 0
    return int(fraction[:6].ljust(6, "0"))


def _clock(match: re.Match[str]) -> time:
    return time(
        int(match["H"]), int(match["M"]), int(match["S"]), _micros(match["frac"])
    )


def _month(name: str) -> int:
    try:
        return MONTHS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown month name {name!r}") from None


def _offset(text: str) -> timezone:
    if text in ("Z", "z"):
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if minutes >= 60:
        raise ValueError(f"invalid UTC offset {text!r}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _combine(day: date, match: re.Match[str], tz: timezone = timezone.utc) -> datetime:
    return as_utc(datetime.combine(day, _clock(match), tzinfo=tz))


def injected_year(month: int, day: int, reference: datetime) -> int:
    """Year for a yearless month/day seen at ``reference``.

    A month/day later in the calendar than the reference day belongs to the
    previous year.
    """
    ref = as_utc(reference)
    if (month, day) > (ref.month, ref.day):
        return ref.year - 1
    return ref.year


def _yearless(month: int, day: int, match: re.Match[str], reference: datetime) -> datetime:
    year = injected_year(month, day, reference)
    return _combine(date(year, month, day), match)


def _parse_epoch(match: re.Match[str], reference: datetime) -> datetime:
    seconds = int(match["secs"])
    if not EPOCH_MIN <= seconds <= EPOCH_MAX:
        raise ValueError(f"epoch seconds out of range: {seconds}")
    return EPOCH + timedelta(seconds=seconds, microseconds=_micros(match["frac"]))


def _parse_ymd(match: re.Match[str], reference: datetime) -> datetime:
    day = date(int(match["y"]), int(match["mo"]), int(match["d"]))
    tz = _offset(match["tz"]) if "tz" in match.re.groupindex else timezone.utc
    return _combine(day, match, tz)


def _parse_apache(match: re.Match[str], reference: datetime) -> datetime:
    day = date(int(match["y"]), _month(match["mon"]), int(match["d"]))
    return _combine(day, match, _offset(match["tz"]))


def _parse_rfc2822(match: re.Match[str], reference: datetime) -> datetime:
    try:
        parsed = parsedate_to_datetime(match.group(0))
    except (TypeError, IndexError) as exc:
        raise ValueError(str(exc)) from exc
    return as_utc(parsed)


def _parse_european(match: re.Match[str], reference: datetime) -> datetime:
    day = date(int(match["y"]), int(match["b"]), int(match["a"]))
    return _combine(day, match)


def _parse_us(match: re.Match[str], reference: datetime) -> datetime:
    day = date(int(match["y"]), int(match["a"]), int(match["b"]))
    return _combine(day, match)


def _parse_syslog(match: re.Match[str], reference: datetime) -> datetime:
    return _yearless(_month(match["mon"]), int(match["d"]), match, reference)


def _parse_yearless_iso(match: re.Match[str], reference: datetime) -> datetime:
    return _yearless(int(match["mo"]), int(match["d"]), match, reference)


def _parse_time_only(match: re.Match[str], reference: datetime) -> datetime:
    return _combine(as_utc(reference).date(), match)


_SLASH_DATE = r"(?P<a>\d{1,2})(?P<sep>[/-])(?P<b>\d{1,2})(?P=sep)(?P<y>\d{4})\s+" + _T

FORMAT_RULES: tuple[FormatRule, ...] = (
    FormatRule("epoch", re.compile(r"(?P<secs>\d{10})(?:\.(?P<frac>\d{1,9}))?"), _parse_epoch),
    FormatRule(
        "iso8601_offset",
        re.compile(_YMD + r"[T ]" + _T + r"\s?(?P<tz>[zZ]|[+-]\d{2}:?\d{2})"),
        _parse_ymd,
    ),
    FormatRule("iso8601", re.compile(_YMD + r"T" + _T), _parse_ymd),
    FormatRule(
        "datetime",
        re.compile(r"(?P<y>\d{4})(?P<sep>[-/])(?P<mo>\d{2})(?P=sep)(?P<d>\d{2}) " + _T),
        _parse_ymd,
    ),
    FormatRule(
        "apache",
        re.compile(r"(?P<d>\d{2})/(?P<mon>[A-Za-z]{3})/(?P<y>\d{4}):" + _T + r"\s+(?P<tz>[+-]\d{4})"),
        _parse_apache,
    ),
    FormatRule(
        "rfc2822",
        re.compile(
            r"[A-Za-z]{3},\s+\d{1,2}\s+[A-Za-z]{3}\s+\d{4}\s+\d{2}:\d{2}:\d{2}(?:\s+\S+)?"
        ),
        _parse_rfc2822,
    ),
    FormatRule("european", re.compile(_SLASH_DATE), _parse_european),
    FormatRule("us", re.compile(_SLASH_DATE), _parse_us),
    FormatRule(
        "syslog",
        re.compile(r"(?P<mon>[A-Za-z]{3})\s+(?P<d>\d{1,2})\s+" + _T),
        _parse_syslog,
        injects_date=True,
    ),
    FormatRule(
        "yearless_iso",
        re.compile(r"(?P<mo>\d{2})-(?P<d>\d{2})[T ]" + _T),
        _parse_yearless_iso,
        injects_date=True,
    ),
    FormatRule("time_only", re.compile(_T), _parse_time_only, injects_date=True),
)


# strptime directive -> regex used to locate custom-format candidates in a line
_DIRECTIVES = {
    "Y": r"\d{4}",
    "y": r"\d{2}",
    "m": r"\d{1,2}",
    "d": r"\d{1,2}",
    "H": r"\d{1,2}",
    "I": r"\d{1,2}",
    "M": r"\d{1,2}",
    "S": r"\d{1,2}",
    "f": r"\d{1,6}",
    "j": r"\d{1,3}",
    "b": r"[A-Za-z]{3}",
    "B": r"[A-Za-z]+",
    "a": r"[A-Za-z]{3}",
    "A": r"[A-Za-z]+",
    "p": r"(?:AM|PM|am|pm)",
    "z": r"(?:[zZ]|[+-]\d{2}:?\d{2})",
    "Z": r"[A-Z]{2,5}",
    "T": r"\d{1,2}:\d{1,2}:\d{1,2}",
    "%": "%",
}
_YEAR_DIRECTIVES = frozenset("Yy")
_DATE_DIRECTIVES = frozenset("YymdjbB")


def _directives(fmt: str) -> list[str]:
    return re.findall(r"%(.)", fmt.replace("%%", ""))


def strptime_pattern(fmt: str) -> re.Pattern[str]:
    """Translate a ``strptime`` format into a search pattern.

    Raises:
        ConfigurationError: If the format uses an unsupported directive.
    """
    parts: list[str] = []
    i = 0
    while i < len(fmt):
        char = fmt[i]
        if char == "%":
            if i + 1 >= len(fmt):
                raise ConfigurationError(f"Dangling '%' in time format {fmt!r}")
            directive = fmt[i + 1]
            if directive not in _DIRECTIVES:
                raise ConfigurationError(
                    f"Unsupported directive %{directive} in time format {fmt!r}"
                )
            parts.append(_DIRECTIVES[directive])
            i += 2
        elif char.isspace():
            parts.append(r"\s+")
            while i < len(fmt) and fmt[i].isspace():
                i += 1
        else:
            parts.append(re.escape(char))
            i += 1
    return re.compile("(?P<custom>" + "".join(parts) + ")")


@lru_cache(maxsize=8)
def custom_rule(fmt: str) -> FormatRule:
    """Build the rule for a caller-supplied ``strptime`` format."""
    pattern = strptime_pattern(fmt)
    directives = set(_directives(fmt)) | ({"H", "M", "S"} if "%T" in fmt else set())
    has_year = bool(directives & _YEAR_DIRECTIVES)
    has_date = bool(directives & _DATE_DIRECTIVES)

    def parse(match: re.Match[str], reference: datetime) -> datetime:
        text = match.group(0)
        if has_year:
            return as_utc(datetime.strptime(text, fmt))
        if has_date:
            # 2000 is a leap year so Feb 29 survives until the real year is known
            parsed = datetime.strptime(f"2000 {text}", f"%Y {fmt}")
            year = injected_year(parsed.month, parsed.day, reference)
            return as_utc(parsed.replace(year=year))
        parsed = datetime.strptime(f"2000-01-01 {text}", f"%Y-%m-%d {fmt}")
        ref = as_utc(reference)
        return as_utc(parsed.replace(year=ref.year, month=ref.month, day=ref.day))

    return FormatRule("custom", pattern, parse, injects_date=not has_year)


def resolve(
    text: str,
    reference: datetime,
    custom_format: str | None = None,
) -> Resolution:
    """Parse a candidate with the first format rule that accepts it.

    Args:
        text: Candidate substring.
        reference: Instant used to fill in a missing year or date.
        custom_format: Optional ``strptime`` format. When given it is the only
            rule tried.

    Returns:
        Resolution with the UTC instant and the name of the winning rule.

    Raises:
        UnparseableTimestamp: If no rule accepts the candidate.
    """
    rules = (custom_rule(custom_format),) if custom_format else FORMAT_RULES
    for rule in rules:
        match = rule.pattern.fullmatch(text)
        if match is None:
            continue
        try:
            instant = rule.parse(match, reference)
        except (ValueError, OverflowError):
            continue
        return Resolution(instant=instant, rule=rule.name)
    raise UnparseableTimestamp(f"No format rule accepted {text!r}", text)


class TimestampParser:
    """Extracts and resolves the timestamp of a single log line.

    Args:
        custom_format: Optional ``strptime`` format overriding auto-detection.
    """

    def __init__(self, custom_format: str | None = None) -> None:
        self.custom_format = custom_format or None
        if self.custom_format:
            pattern = custom_rule(self.custom_format).pattern
            self._extractor = CandidateExtractor(pattern)
        else:
            self._extractor = CandidateExtractor()

    def parse_line(self, line: str, reference: datetime) -> Resolution:
        """Resolve the leftmost timestamp candidate in ``line``.

        Raises:
            NoTimestampFound: If the line has no timestamp-shaped text.
            UnparseableTimestamp: If the candidate does not parse.
        """
        candidate = self._extractor.extract(line)
        if candidate is None:
            raise NoTimestampFound("No timestamp-shaped text in line", line)
        resolution = resolve(candidate.text, reference, self.custom_format)
        return Resolution(
            instant=resolution.instant, rule=resolution.rule, candidate=candidate
        )
