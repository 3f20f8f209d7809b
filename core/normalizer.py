"""
Field Normalizer - maps heterogeneous stored rows onto the canonical shape.

The store hands back a header row followed by value tuples. Column names vary
between data sources, so each logical field is located through an ordered
alias table (first alias present in the header wins). Values may be native
numbers/datetimes or free text; parsing never raises for a single cell:
numbers default to 0.0 and dates fall back to splitting the text on the first
space.
"""

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Sequence

import pandas as pd

from core.models import CanonicalRow

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    "SECURITY": ("SECURITY", "SYMBOL", "TICKER", "SEC"),
    "LAST": ("LAST", "PRICE", "CLOSE", "LTP"),
    "VOL": ("VOL", "VOLUME", "QTY", "VOL."),
    "TIMESTAMP": ("TIMESTAMP", "DATE", "TS"),
    "TIME": ("TIME", "CLOCK"),
    "BID": ("BID", "BUY"),
    "ASK": ("ASK", "OFFER", "SELL"),
    "BID QTY": ("BID QTY", "BUY QTY", "BID_QTY"),
    "ASK QTY": ("ASK QTY", "SELL QTY", "ASK_QTY"),
}

AGGREGATION_REQUIRED = ("SECURITY", "LAST", "TIMESTAMP")
INTRADAY_REQUIRED = ("SECURITY", "LAST")


class SchemaError(ValueError):
    """Raised when a required column cannot be located in the header."""

    def __init__(self, missing: Sequence[str], found: Sequence[str]):
        self.missing = list(missing)
        self.found = list(found)
        super().__init__(
            f"Missing required columns: {', '.join(self.missing)}. "
            f"Found headers: {', '.join(self.found) or '(none)'}"
        )


@dataclass(frozen=True)
class RowIssue:
    index: int
    reason: str


class ParsedTimestamp(NamedTuple):
    day: str
    clock: Optional[str]
    instant: Optional[dt.datetime]


def normalize_header(header: Sequence[Any]) -> list[str]:
    return ["" if h is None else str(h).strip().upper() for h in header]


def locate_columns(header: Sequence[Any], required: Sequence[str] = INTRADAY_REQUIRED) -> dict[str, Optional[int]]:
    """Return {field: column index or None} for every field in FIELD_ALIASES.

    Raises:
        SchemaError: if any field in ``required`` has no matching column.
    """
    headers = normalize_header(header)
    columns: dict[str, Optional[int]] = {}
    for field_name, aliases in FIELD_ALIASES.items():
        columns[field_name] = next((headers.index(a) for a in aliases if a in headers), None)

    missing = [f for f in required if columns.get(f) is None]
    if missing:
        logger.warning(f"Critical columns missing. Found headers: {', '.join(headers)}")
        raise SchemaError(missing, headers)
    return columns


def cell(row: Sequence[Any], idx: Optional[int]) -> Any:
    if idx is None or idx >= len(row):
        return None
    return row[idx]


def is_blank(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def clean_number(value: Any) -> float:
    """Parse a numeric cell, stripping thousands separators. Returns 0.0 on failure."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace(",", "").strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def clean_security(value: Any) -> str:
    return "" if value is None else str(value).strip().upper()


def localize(value: dt.datetime, tz: dt.tzinfo) -> dt.datetime:
    """Attach the market timezone to naive datetimes; aware ones are kept as-is."""
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def parse_datetime_text(text: str, tz: dt.tzinfo) -> Optional[dt.datetime]:
    text = text.strip()
    if not text:
        return None
    try:
        parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return localize(parsed, tz)


def parse_timestamp(value: Any, tz: dt.tzinfo) -> ParsedTimestamp:
    """Split a stored timestamp into (calendar day, clock, absolute instant).

    Native datetimes are read directly. Text goes through general date-time
    parsing; when that fails the text before the first space is taken as the
    day token and the remainder as the clock token, and ``instant`` is None.
    """
    if is_blank(value):
        return ParsedTimestamp("", None, None)

    if isinstance(value, dt.datetime):
        instant = localize(value, tz)
        local = instant.astimezone(tz)
        return ParsedTimestamp(local.date().isoformat(), local.strftime("%H:%M:%S"), instant)

    if isinstance(value, dt.date):
        instant = dt.datetime.combine(value, dt.time(), tzinfo=tz)
        return ParsedTimestamp(value.isoformat(), None, instant)

    text = str(value).strip()
    instant = parse_datetime_text(text, tz)
    if instant is not None:
        local = instant.astimezone(tz)
        return ParsedTimestamp(local.date().isoformat(), local.strftime("%H:%M:%S"), instant)

    day, _, rest = text.partition(" ")
    return ParsedTimestamp(day, rest.strip() or None, None)


def format_clock(value: Any, tz: dt.tzinfo) -> Optional[str]:
    """Display form of a TIME cell."""
    if is_blank(value):
        return None
    if isinstance(value, dt.datetime):
        return localize(value, tz).astimezone(tz).strftime("%H:%M:%S")
    if isinstance(value, dt.time):
        return value.strftime("%H:%M:%S")
    return str(value).strip()


def combine_day_time(day: str, time_value: Any, tz: dt.tzinfo) -> Optional[dt.datetime]:
    """Resolve a TIME cell on a calendar day to an absolute instant."""
    if is_blank(time_value):
        return None
    if isinstance(time_value, dt.datetime):
        return localize(time_value, tz)
    if isinstance(time_value, dt.time):
        try:
            return dt.datetime.combine(dt.date.fromisoformat(day), time_value).replace(tzinfo=tz)
        except ValueError:
            return None
    return parse_datetime_text(f"{day} {str(time_value).strip()}", tz)


def normalize_rows(values: Sequence[Sequence[Any]], tz: dt.tzinfo,
                   required: Sequence[str] = AGGREGATION_REQUIRED) -> tuple[list[CanonicalRow], list[RowIssue]]:
    """Map store rows (header first) onto CanonicalRow records.

    Rows with an empty SECURITY or TIMESTAMP are skipped and reported; every
    other anomaly degrades the affected field and keeps the row.
    """
    if not values:
        return [], []

    columns = locate_columns(values[0], required)
    rows: list[CanonicalRow] = []
    issues: list[RowIssue] = []

    for index, raw in enumerate(values[1:], start=1):
        security = clean_security(cell(raw, columns["SECURITY"]))
        if not security:
            issues.append(RowIssue(index, "missing SECURITY"))
            continue
        ts_value = cell(raw, columns["TIMESTAMP"])
        if is_blank(ts_value):
            issues.append(RowIssue(index, "missing TIMESTAMP"))
            continue

        parsed = parse_timestamp(ts_value, tz)
        raw_time = cell(raw, columns["TIME"])
        rows.append(
            CanonicalRow(
                security=security,
                last=clean_number(cell(raw, columns["LAST"])),
                vol=max(clean_number(cell(raw, columns["VOL"])), 0.0),
                timestamp=ts_value,
                instant=parsed.instant,
                day=parsed.day,
                time=format_clock(raw_time, tz),
                raw_time=raw_time,
            )
        )
    return rows, issues
