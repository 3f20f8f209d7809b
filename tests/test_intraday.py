import datetime as dt

import pytest

from core.intraday import build_intraday_timeline, deduplicate, order_book_metrics
from core.models import IntradayPoint
from core.normalizer import SchemaError

from conftest import HEADER

UTC = dt.timezone.utc
DAY = dt.date(2024, 5, 14)
LATER = dt.datetime(2024, 5, 20, 12, 0, tzinfo=UTC)


def at(hour, minute, second=0, day=DAY):
    return dt.datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=UTC)


def tick(security, last, ts, vol=0, bid=0, ask=0, bid_qty=0, ask_qty=0):
    return (security, last, ts.strftime("%H:%M:%S"), ts, vol, bid, ask, bid_qty, ask_qty)


def test_same_minute_same_price_collapses_to_latest_volume():
    values = [
        HEADER,
        tick("ABC", 100.0, at(10, 0, 5), vol=1000),
        tick("ABC", 100.0, at(10, 0, 20), vol=1500, bid_qty=10, ask_qty=30),
        tick("ABC", 100.0, at(10, 0, 45), vol=1800, bid_qty=30, ask_qty=10),
    ]
    timeline = build_intraday_timeline(values, "ABC", UTC, now=LATER)
    assert timeline.day == "2024-05-14"
    assert len(timeline.points) == 1
    point = timeline.points[0]
    assert point.time == "10:00"
    assert point.volume == 1800
    assert point.imbalance == 0.5


def test_new_point_on_price_or_minute_change():
    values = [
        HEADER,
        tick("ABC", 100.0, at(10, 0, 5)),
        tick("ABC", 101.0, at(10, 0, 30)),
        tick("ABC", 101.0, at(10, 1, 0)),
        tick("ABC", 101.0, at(10, 1, 30)),
    ]
    points = build_intraday_timeline(values, "ABC", UTC, now=LATER).points
    assert [(p.time, p.price) for p in points] == [("10:00", 100.0), ("10:00", 101.0), ("10:01", 101.0)]


def test_ticks_sorted_by_capture_time_with_running_max_volume():
    values = [
        HEADER,
        tick("ABC", 103.0, at(11, 0), vol=900),
        tick("ABC", 101.0, at(9, 30), vol=500),
        tick("ABC", 102.0, at(10, 15), vol=700),
        tick("ABC", 104.0, at(11, 30), vol=650),
    ]
    points = build_intraday_timeline(values, "ABC", UTC, now=LATER).points
    assert [p.time for p in points] == ["09:30", "10:15", "11:00", "11:30"]
    assert [p.volume for p in points] == [500, 700, 900, 900]


def test_target_day_is_day_of_most_recently_stored_tick():
    values = [
        HEADER,
        tick("ABC", 100.0, at(10, 0, day=dt.date(2024, 5, 15))),
        tick("XYZ", 50.0, at(10, 0, day=dt.date(2024, 5, 16))),
        tick("ABC", 99.0, at(14, 0)),
        tick("ABC", 98.0, at(14, 5)),
    ]
    timeline = build_intraday_timeline(values, " abc ", UTC, now=LATER)
    assert timeline.security == "ABC"
    assert timeline.day == "2024-05-14"
    assert [p.price for p in timeline.points] == [99.0, 98.0]


def test_unknown_security_is_empty():
    values = [HEADER, tick("ABC", 100.0, at(10, 0))]
    timeline = build_intraday_timeline(values, "NOPE", UTC, now=LATER)
    assert timeline.day is None
    assert timeline.points == []


def test_missing_price_column_is_schema_error():
    with pytest.raises(SchemaError):
        build_intraday_timeline([("SECURITY", "TIMESTAMP"), ("ABC", at(10, 0))], "ABC", UTC, now=LATER)


def test_order_book_metrics():
    assert order_book_metrics(100.0, 102.0, 300.0, 100.0) == (2.0, 0.5)
    assert order_book_metrics(0.0, 102.0, 1.0, 2.0) == (0.0, -0.33)
    assert order_book_metrics(100.0, 102.0, 0.0, 0.0) == (2.0, 0.0)


def test_text_timestamps_with_thousand_separators():
    values = [
        ("Symbol", "Price", "Volume", "Date", "Buy", "Sell", "Buy Qty", "Sell Qty"),
        ("ABC", "1,250", "12,000", "2024-05-14 09:01:10", "1,240", "1,260", "500", "1,500"),
    ]
    (point,) = build_intraday_timeline(values, "ABC", UTC, now=LATER).points
    assert point.time == "09:01"
    assert point.price == 1250.0
    assert point.volume == 12000.0
    assert point.spread == 20.0
    assert point.imbalance == -0.5


def test_extends_to_now_when_target_day_is_today():
    now = at(15, 42)
    values = [HEADER, tick("ABC", 100.0, at(10, 0), vol=100), tick("ABC", 101.0, at(11, 0), vol=300)]
    points = build_intraday_timeline(values, "ABC", UTC, now=now).points
    assert len(points) == 3
    last = points[-1]
    assert last.synthetic is True
    assert last.time == "15:42"
    assert (last.price, last.volume) == (101.0, 300)
    assert not any(p.synthetic for p in points[:-1])


def test_no_extension_when_last_label_is_now_or_day_is_past():
    values = [HEADER, tick("ABC", 100.0, at(10, 0))]
    assert len(build_intraday_timeline(values, "ABC", UTC, now=at(10, 0, 40)).points) == 1
    assert len(build_intraday_timeline(values, "ABC", UTC, now=LATER).points) == 1


def test_deduplicate_keeps_latest_depth():
    ticks = [
        IntradayPoint(time="10:00", price=5.0, volume=10, imbalance=0.1),
        IntradayPoint(time="10:00", price=5.0, volume=20, imbalance=-0.4),
    ]
    (point,) = deduplicate(ticks)
    assert point.volume == 20
    assert point.imbalance == -0.4
