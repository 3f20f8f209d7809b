import copy
import datetime as dt

import pytest

from core.normalizer import SchemaError
from core.pipeline import compute_analytics
from core.snapshot import latest_per_security, top_movers

UTC = dt.timezone.utc


def test_end_to_end_daily_returns(abc_rows):
    result = compute_analytics(abc_rows, UTC)
    day1, day2 = result.rows
    assert (day1.last, day1.vol) == (102.0, 900.0)
    assert (day2.last, day2.vol) == (99.0, 400.0)
    assert day1.dod is None
    assert day2.dod == pytest.approx((99.0 - 102.0) / 102.0)
    assert day2.dod == pytest.approx(-0.0294, abs=1e-4)
    assert day2.avg_vol_30 == pytest.approx(650.0)
    assert result.issues == []


def test_wire_record_has_every_field_and_null_for_no_value(abc_rows):
    record = compute_analytics(abc_rows, UTC).rows[0].to_dict()
    assert set(record) == {
        "SECURITY", "LAST", "VOL", "TIMESTAMP", "TIME", "DATE", "DoD", "MoM", "YoY",
        "avgVol30", "rvol", "liquidityScore", "momentumSignal", "hypeRisk", "stableTrend", "tradeScore",
    }
    assert record["DoD"] is None
    assert record["MoM"] is None
    assert record["TIMESTAMP"] == "2024-01-01T09:05:00+00:00"
    assert record["DATE"] == "2024-01-01"


def test_missing_security_column_fails_whole_query():
    values = [("NAME", "LAST", "TIMESTAMP"), ("ABC", 1.0, "2024-01-01")]
    with pytest.raises(SchemaError):
        compute_analytics(values, UTC)


def test_header_only_store_is_empty_success():
    result = compute_analytics([("SECURITY", "LAST", "TIMESTAMP")], UTC)
    assert result.rows == []
    assert compute_analytics([], UTC).rows == []


def test_pipeline_is_idempotent_and_leaves_input_untouched(abc_rows):
    before = copy.deepcopy(abc_rows)
    first = [r.to_dict() for r in compute_analytics(abc_rows, UTC).rows]
    second = [r.to_dict() for r in compute_analytics(abc_rows, UTC).rows]
    assert first == second
    assert abc_rows == before


def test_skipped_rows_are_reported(abc_rows):
    values = abc_rows + [("", 1.0, 1.0, dt.datetime(2024, 1, 3, tzinfo=UTC))]
    result = compute_analytics(values, UTC)
    assert len(result.rows) == 2
    assert [i.reason for i in result.issues] == ["missing SECURITY"]


def test_latest_per_security_and_movers():
    values = [
        ("SECURITY", "LAST", "VOL", "TIMESTAMP"),
        ("AAA", 10.0, 100.0, "2024-01-01 10:00"),
        ("AAA", 11.0, 100.0, "2024-01-02 10:00"),
        ("BBB", 20.0, 100.0, "2024-01-01 10:00"),
        ("BBB", 16.0, 100.0, "2024-01-02 10:00"),
        ("CCC", 5.0, 100.0, "2024-01-02 10:00"),
    ]
    rows = compute_analytics(values, UTC).rows
    latest = latest_per_security(rows)
    assert [(r.security, r.day) for r in latest] == [
        ("AAA", "2024-01-02"), ("BBB", "2024-01-02"), ("CCC", "2024-01-02"),
    ]
    movers = top_movers(rows, limit=2)
    assert [r.security for r in movers] == ["BBB", "AAA"]
