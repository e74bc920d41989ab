from datetime import datetime, timedelta, timezone

import pytest

from core.result_shaper import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    clamp_limit,
    format_csv_value,
    format_timestamp,
    normalize_row,
    normalize_value,
    shape_rows,
)


@pytest.mark.parametrize("requested, expected", [
    (0, DEFAULT_LIMIT),
    (-5, DEFAULT_LIMIT),
    (None, DEFAULT_LIMIT),
    (1, 1),
    (50, 50),
    (MAX_LIMIT, MAX_LIMIT),
    (5000, MAX_LIMIT),
])
def test_clamp_limit(requested, expected):
    assert clamp_limit(requested) == expected


@pytest.mark.parametrize("requested", [-1, 0, 7, 1000, 99999])
def test_clamp_limit_idempotent(requested):
    once = clamp_limit(requested)
    assert clamp_limit(once) == once
    assert 1 <= once <= MAX_LIMIT


# ── Truncation ────────────────────────────────────────────────────────────────

def test_more_rows_than_limit_sets_more():
    rows, more = shape_rows(([i] for i in range(5)), 3)
    assert rows == [[0], [1], [2]]
    assert more is True


def test_exactly_limit_rows_is_not_more():
    rows, more = shape_rows([[1], [2], [3]], 3)
    assert len(rows) == 3
    assert more is False


def test_zero_rows():
    rows, more = shape_rows([], 10)
    assert rows == []
    assert more is False


def test_does_not_consume_past_the_peeked_row():
    source = iter([[i] for i in range(10)])
    shape_rows(source, 2)
    # Two returned, one peeked.
    assert next(source) == [3]


# ── Value formats ─────────────────────────────────────────────────────────────

def test_timestamp_utc_with_fraction():
    ts = datetime(2024, 1, 2, 3, 4, 5, 120000, tzinfo=timezone.utc)
    assert format_timestamp(ts) == "2024-01-02T03:04:05.12Z"


def test_timestamp_naive_is_utc():
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"


def test_timestamp_keeps_offset():
    tz = timezone(timedelta(hours=5, minutes=30))
    assert format_timestamp(datetime(2024, 6, 1, 12, 0, 0, tzinfo=tz)) == "2024-06-01T12:00:00+05:30"


def test_timestamp_second_precision():
    ts = datetime(2024, 1, 2, 3, 4, 5, 999999, tzinfo=timezone.utc)
    assert format_timestamp(ts, fractional=False) == "2024-01-02T03:04:05Z"


def test_normalize_values():
    ts = datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert normalize_row([None, b"abc", bytearray(b"xy"), memoryview(b"m"), ts, 3, 1.5, "s", True]) == [
        None, "abc", "xy", "m", "2024-01-02T00:00:00Z", 3, 1.5, "s", True,
    ]


def test_invalid_utf8_is_replaced():
    assert normalize_value(b"ok\xff") == "ok\ufffd"


def test_csv_values():
    assert format_csv_value(None) == ""
    assert format_csv_value(b"raw") == "raw"
    assert format_csv_value(42) == "42"
    assert format_csv_value(datetime(2024, 1, 2, 3, 4, 5, 500000)) == "2024-01-02T03:04:05Z"
