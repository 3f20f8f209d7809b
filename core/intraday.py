"""
Intraday Timeline Builder.

Builds the price/volume/order-book series of one security for its most
recent trading day, straight from the unaggregated store rows:

    1. target day = day of the most recently stored tick for the security
    2. filter that day's ticks, label them HH:MM and compute spread/imbalance
    3. sort by capture time
    4. collapse consecutive ticks sharing (minute label, price)
    5. extend a stale series to "now" when the target day is today
"""

import datetime as dt
import logging
import re
from dataclasses import replace
from typing import Any, Optional, Sequence

from core.models import IntradayPoint, IntradayTimeline
from core.normalizer import (
    INTRADAY_REQUIRED,
    ParsedTimestamp,
    cell,
    clean_number,
    clean_security,
    is_blank,
    locate_columns,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})")
UNKNOWN_LABEL = "??"


def time_label(parsed: ParsedTimestamp, tz: dt.tzinfo) -> str:
    if parsed.instant is not None:
        return parsed.instant.astimezone(tz).strftime("%H:%M")
    if parsed.clock:
        match = _CLOCK_RE.match(parsed.clock)
        if match:
            return f"{int(match.group(1)):02d}:{match.group(2)}"
        return parsed.clock
    return UNKNOWN_LABEL


def resolve_target_day(values: Sequence[Sequence[Any]], columns: dict, symbol: str, tz: dt.tzinfo) -> Optional[str]:
    """Day of the most recently stored tick for ``symbol``, scanning from the end."""
    for raw in reversed(values[1:]):
        if clean_security(cell(raw, columns["SECURITY"])) != symbol:
            continue
        ts_value = cell(raw, columns["TIMESTAMP"])
        if is_blank(ts_value):
            continue
        day = parse_timestamp(ts_value, tz).day
        if day:
            return day
    return None


def order_book_metrics(bid: float, ask: float, bid_qty: float, ask_qty: float) -> tuple[float, float]:
    """Return (spread, imbalance); both 0 when the book side data is missing."""
    spread = ask - bid if ask > 0 and bid > 0 else 0.0
    depth = bid_qty + ask_qty
    imbalance = round((bid_qty - ask_qty) / depth, 2) if depth > 0 else 0.0
    return spread, imbalance


def _collect_ticks(values, columns, symbol, target_day, tz) -> list[IntradayPoint]:
    ticks = []
    for raw in values[1:]:
        if clean_security(cell(raw, columns["SECURITY"])) != symbol:
            continue
        ts_value = cell(raw, columns["TIMESTAMP"])
        if is_blank(ts_value):
            continue
        parsed = parse_timestamp(ts_value, tz)
        if parsed.day != target_day:
            continue

        bid = clean_number(cell(raw, columns["BID"]))
        ask = clean_number(cell(raw, columns["ASK"]))
        bid_qty = clean_number(cell(raw, columns["BID QTY"]))
        ask_qty = clean_number(cell(raw, columns["ASK QTY"]))
        spread, imbalance = order_book_metrics(bid, ask, bid_qty, ask_qty)
        ticks.append(
            IntradayPoint(
                time=time_label(parsed, tz),
                price=clean_number(cell(raw, columns["LAST"])),
                volume=clean_number(cell(raw, columns["VOL"])),
                spread=spread,
                imbalance=imbalance,
                bid=bid,
                ask=ask,
                bid_qty=bid_qty,
                ask_qty=ask_qty,
                sort_value=parsed.instant.timestamp() if parsed.instant is not None else 0.0,
            )
        )
    return ticks


def deduplicate(ticks: Sequence[IntradayPoint]) -> list[IntradayPoint]:
    """Start a new point when the minute label or the price changes; otherwise
    the latest tick replaces the previous point so its volume and depth survive.
    """
    results: list[IntradayPoint] = []
    cumulative_vol = 0.0
    for tick in ticks:
        cumulative_vol = max(cumulative_vol, tick.volume)
        point = replace(tick, volume=cumulative_vol)
        if results and point.time == results[-1].time and point.price == results[-1].price:
            results[-1] = point
        else:
            results.append(point)
    return results


def extend_to_present(points: list[IntradayPoint], target_day: str, now: dt.datetime, tz: dt.tzinfo) -> list[IntradayPoint]:
    if not points:
        return points
    local_now = now.astimezone(tz)
    now_label = local_now.strftime("%H:%M")
    if points[-1].time != now_label and target_day == local_now.date().isoformat():
        points.append(replace(points[-1], time=now_label, sort_value=local_now.timestamp(), synthetic=True))
    return points


def build_intraday_timeline(values: Sequence[Sequence[Any]], security: str, tz: dt.tzinfo,
                            now: Optional[dt.datetime] = None) -> IntradayTimeline:
    """Build the deduplicated intraday series for ``security``.

    Raises:
        SchemaError: if SECURITY or LAST cannot be located in the header.
    """
    symbol = clean_security(security)
    timeline = IntradayTimeline(security=symbol)
    if len(values) < 2:
        return timeline

    columns = locate_columns(values[0], INTRADAY_REQUIRED)
    target_day = resolve_target_day(values, columns, symbol, tz)
    if not target_day:
        logger.info(f"No data found for: {symbol}")
        return timeline
    timeline.day = target_day

    ticks = _collect_ticks(values, columns, symbol, target_day, tz)
    if not ticks:
        return timeline
    ticks.sort(key=lambda t: t.sort_value)

    points = deduplicate(ticks)
    timeline.points = extend_to_present(points, target_day, now or dt.datetime.now(tz), tz)
    logger.info(f"Returning {len(timeline.points)} unique points for timeline.")
    return timeline
