"""
Result shaper — turns driver rows into JSON/CSV-ready values.

Interactive results are bounded by a clamped row limit; the CSV path applies
the same normalization but no limit.
"""
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

DEFAULT_LIMIT = 200
MAX_LIMIT = 1000


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    if limit > MAX_LIMIT:
        return MAX_LIMIT
    return limit


# ── Value normalization ───────────────────────────────────────────────────────

def _as_utc_aware(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


def _format_offset(ts: datetime) -> str:
    offset = ts.utcoffset()
    if not offset:
        return "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_timestamp(ts: datetime, fractional: bool = True) -> str:
    """RFC 3339. Fractional seconds keep full precision with trailing zeros trimmed."""
    ts = _as_utc_aware(ts)
    text = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if fractional and ts.microsecond:
        text += "." + f"{ts.microsecond:06d}".rstrip("0")
    return text + _format_offset(ts)


def _decode(value) -> str:
    return bytes(value).decode("utf-8", errors="replace")


def normalize_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _decode(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def normalize_row(values: Sequence[Any]) -> list[Any]:
    return [normalize_value(v) for v in values]


def format_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _decode(value)
    if isinstance(value, datetime):
        return format_timestamp(value, fractional=False)
    return str(value)


# ── Bounded iteration ─────────────────────────────────────────────────────────

def shape_rows(rows: Iterable[Sequence[Any]], limit: int) -> tuple[list[list[Any]], bool]:
    """
    Read at most `limit` rows. Returns (normalized_rows, more) where `more`
    is True when at least one further row was available. Nothing past that
    extra row is consumed.
    """
    shaped: list[list[Any]] = []
    more = False
    for row in rows:
        if len(shaped) >= limit:
            more = True
            break
        shaped.append(normalize_row(row))
    return shaped, more
