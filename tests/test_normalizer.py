import datetime as dt

import pytest

from core.normalizer import (
    SchemaError,
    clean_number,
    combine_day_time,
    locate_columns,
    normalize_rows,
    parse_timestamp,
)

UTC = dt.timezone.utc


def test_locate_columns_matches_aliases_case_insensitively():
    cols = locate_columns([" symbol ", "Ltp", "volume", "date", "clock", "buy qty"])
    assert cols["SECURITY"] == 0
    assert cols["LAST"] == 1
    assert cols["VOL"] == 2
    assert cols["TIMESTAMP"] == 3
    assert cols["TIME"] == 4
    assert cols["BID QTY"] == 5
    assert cols["ASK"] is None


def test_locate_columns_prefers_earlier_alias():
    cols = locate_columns(["PRICE", "LAST", "TICKER"])
    assert cols["LAST"] == 1


def test_volume_alias_priority_ignores_header_position():
    cols = locate_columns(["SYMBOL", "PRICE", "VOL.", "QTY"])
    assert cols["VOL"] == 3
    assert locate_columns(["SYMBOL", "PRICE", "Vol.", "Volume"])["VOL"] == 3


def test_missing_security_column_is_schema_error():
    with pytest.raises(SchemaError) as exc:
        normalize_rows([("NAME", "LAST", "TIMESTAMP"), ("x", "1", "2024-01-01")], UTC)
    assert "SECURITY" in exc.value.missing
    assert str(exc.value).startswith("Missing required columns")


def test_timestamp_required_only_for_aggregation():
    locate_columns(["SECURITY", "LAST"])
    with pytest.raises(SchemaError):
        locate_columns(["SECURITY", "LAST"], ("SECURITY", "LAST", "TIMESTAMP"))


@pytest.mark.parametrize("raw,expected", [
    ("1,234.50", 1234.5),
    (" 12 ", 12.0),
    (250, 250.0),
    ("", 0.0),
    (None, 0.0),
    ("n/a", 0.0),
    (float("nan"), 0.0),
])
def test_clean_number(raw, expected):
    assert clean_number(raw) == expected


def test_parse_timestamp_native_datetime():
    parsed = parse_timestamp(dt.datetime(2024, 3, 5, 14, 30, tzinfo=UTC), UTC)
    assert parsed.day == "2024-03-05"
    assert parsed.clock == "14:30:00"
    assert parsed.instant == dt.datetime(2024, 3, 5, 14, 30, tzinfo=UTC)


def test_parse_timestamp_text_is_localized():
    parsed = parse_timestamp("2024-03-05 09:15:00", UTC)
    assert parsed.day == "2024-03-05"
    assert parsed.instant == dt.datetime(2024, 3, 5, 9, 15, tzinfo=UTC)


def test_parse_timestamp_converts_to_market_timezone():
    eat = dt.timezone(dt.timedelta(hours=3))
    parsed = parse_timestamp(dt.datetime(2024, 3, 5, 22, 30, tzinfo=UTC), eat)
    assert parsed.day == "2024-03-06"
    assert parsed.clock == "01:30:00"


def test_parse_timestamp_unparseable_text_falls_back_to_split():
    parsed = parse_timestamp("day-one around-noon", UTC)
    assert parsed.day == "day-one"
    assert parsed.clock == "around-noon"
    assert parsed.instant is None


def test_combine_day_time_text_clock():
    combined = combine_day_time("2024-01-01", "09:05:00", UTC)
    assert combined == dt.datetime(2024, 1, 1, 9, 5, tzinfo=UTC)
    assert combine_day_time("2024-01-01", None, UTC) is None


def test_normalize_rows_skips_rows_without_security_or_timestamp():
    values = [
        ("Ticker", "Price", "Vol.", "TS"),
        ("abc ", "1,000", "2,500", "2024-01-01 10:00"),
        ("", "1", "1", "2024-01-01 10:00"),
        ("XYZ", "1", "1", ""),
        ("XYZ", "oops", "", "2024-01-01 10:00"),
    ]
    rows, issues = normalize_rows(values, UTC)
    assert [r.security for r in rows] == ["ABC", "XYZ"]
    assert rows[0].last == 1000.0
    assert rows[0].vol == 2500.0
    # Degraded but kept
    assert rows[1].last == 0.0
    assert rows[1].vol == 0.0
    assert [(i.index, i.reason) for i in issues] == [(2, "missing SECURITY"), (3, "missing TIMESTAMP")]


def test_normalize_rows_does_not_mutate_input(abc_rows):
    snapshot = [tuple(r) for r in abc_rows]
    normalize_rows(abc_rows, UTC)
    assert abc_rows == snapshot
