"""BDD step definitions for batch processing features."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import pytest
from pytest_bdd import given, parsers, then, when

from logpile.config import Settings
from logpile.core.buckets import parse_bucket_spec
from logpile.core.models import Snapshot
from logpile.core.processor import LogSession


@dataclass
class ProcessingContext:
    """State shared between the steps of one scenario."""

    reference: datetime | None = None
    lines: list[str] = field(default_factory=list)
    session: LogSession | None = None
    snapshot: Snapshot | None = None


def _table_column(datatable: list[list[str]], name: str) -> list[str]:
    header, *rows = datatable
    index = header.index(name)
    return [row[index] for row in rows]


@pytest.fixture
def ctx() -> ProcessingContext:
    """Fresh scenario context for each test."""
    return ProcessingContext()


@given(parsers.parse('the reference time is "{value}"'))
def given_reference_time(ctx: ProcessingContext, value: str) -> None:
    ctx.reference = datetime.fromisoformat(value.replace("Z", "+00:00"))


@given("a log containing:")
def given_log_lines(ctx: ProcessingContext, datatable: list[list[str]]) -> None:
    ctx.lines = _table_column(datatable, "line")


@when(parsers.parse('the log is processed with pattern "{pattern}" and bucket "{bucket}"'))
def when_processed(ctx: ProcessingContext, pattern: str, bucket: str) -> None:
    reference = ctx.reference
    assert reference is not None
    settings = Settings(patterns=[re.compile(pattern)], bucket=parse_bucket_spec(bucket))
    ctx.session = LogSession(settings, clock=lambda: reference)
    ctx.session.process_lines(ctx.lines)
    ctx.snapshot = ctx.session.finish()


@then("the buckets are:")
def then_buckets_are(ctx: ProcessingContext, datatable: list[list[str]]) -> None:
    assert ctx.snapshot is not None
    expected = list(
        zip(_table_column(datatable, "start"), map(int, _table_column(datatable, "count")))
    )
    actual = [
        (bucket.start.isoformat().replace("+00:00", "Z"), bucket.count)
        for bucket in ctx.snapshot.buckets
    ]
    assert actual == expected


@then(parsers.parse("{n:d} lines were bucketed"))
def then_bucketed(ctx: ProcessingContext, n: int) -> None:
    assert ctx.session is not None
    assert ctx.session.stats.bucketed == n
    assert ctx.snapshot is not None
    assert sum(bucket.count for bucket in ctx.snapshot.buckets) == n


@then(parsers.parse("{n:d} lines had no timestamp"))
def then_no_timestamp(ctx: ProcessingContext, n: int) -> None:
    assert ctx.session is not None
    assert ctx.session.stats.no_timestamp == n


@then(parsers.parse("{n:d} lines had an unparseable timestamp"))
def then_unparseable(ctx: ProcessingContext, n: int) -> None:
    assert ctx.session is not None
    assert ctx.session.stats.unparseable == n


@then(parsers.parse("the bucket size is {seconds:d} seconds"))
def then_bucket_size(ctx: ProcessingContext, seconds: int) -> None:
    assert ctx.snapshot is not None
    assert ctx.snapshot.bucket_size == timedelta(seconds=seconds)


@then("there are no buckets")
def then_no_buckets(ctx: ProcessingContext) -> None:
    assert ctx.snapshot is not None
    assert ctx.snapshot.buckets == ()


@then("the time range is empty")
def then_empty_range(ctx: ProcessingContext) -> None:
    assert ctx.snapshot is not None
    assert ctx.snapshot.time_range is None
