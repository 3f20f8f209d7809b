"""Daily Aggregator - collapse ticks into one daily-close row per (security, day)."""

import datetime as dt
import logging
from typing import Iterable

from core.models import CanonicalRow, DailyRow
from core.normalizer import combine_day_time

logger = logging.getLogger(__name__)


def tick_time(row: CanonicalRow, tz: dt.tzinfo) -> float:
    """Epoch seconds of a tick: TIME on the row's day, else TIMESTAMP, else 0."""
    combined = combine_day_time(row.day, row.raw_time, tz)
    if combined is not None:
        return combined.timestamp()
    if row.instant is not None:
        return row.instant.timestamp()
    return 0.0


def _merge_volume(old: float, new: float, volume_mode: str) -> float:
    if volume_mode == "sum":
        return old + new
    # The feed reports cumulative volume for the day
    return max(old, new)


def aggregate_daily_closes(rows: Iterable[CanonicalRow], tz: dt.tzinfo, volume_mode: str = "max") -> list[DailyRow]:
    """
    Aggregate intraday ticks into daily closes per security.

    Price and timestamp come from the chronologically latest tick of the day,
    whatever order the ticks arrived in. Volume is merged across every tick
    of the day according to ``volume_mode``.

    Returns rows in first-seen (security, day) order.
    """
    daily: dict[tuple[str, str], DailyRow] = {}

    for row in rows:
        key = (row.security, row.day)
        current_time = tick_time(row, tz)
        existing = daily.get(key)

        if existing is None:
            daily[key] = DailyRow.from_canonical(row, current_time)
        elif current_time >= existing.tick_time:
            volume = _merge_volume(existing.vol, row.vol, volume_mode)
            replacement = DailyRow.from_canonical(row, current_time)
            replacement.vol = volume
            daily[key] = replacement
        else:
            existing.vol = _merge_volume(existing.vol, row.vol, volume_mode)

    logger.info(f"Daily rows aggregated: {len(daily)}")
    return list(daily.values())
