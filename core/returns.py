"""Return Calculator - trailing percentage returns at fixed row lags."""

from typing import Iterable, Optional, Sequence

from core.models import DailyRow
from utils.constants import TRADING_DAYS


def group_by_security(rows: Iterable[DailyRow]) -> dict[str, list[DailyRow]]:
    """Group rows per security and sort each group ascending by TIMESTAMP.

    The sort is stable; rows with unparseable timestamps sort as time zero.
    """
    grouped: dict[str, list[DailyRow]] = {}
    for row in rows:
        if not row.security:
            continue
        grouped.setdefault(row.security, []).append(row)
    for group in grouped.values():
        group.sort(key=lambda r: r.sort_key)
    return grouped


def calc_return(rows: Sequence[DailyRow], index: int, lag: int) -> Optional[float]:
    """(p[i] - p[i-lag]) / p[i-lag], or None without enough history or with a zero price."""
    if index < lag:
        return None
    today = rows[index].last
    past = rows[index - lag].last
    if today == 0 or past == 0:
        return None
    return (today - past) / past


def compute_returns(rows: Iterable[DailyRow], lags: dict = TRADING_DAYS) -> list[DailyRow]:
    """Set DoD/MoM/YoY on every row; lags count trading observations, not calendar days."""
    grouped = group_by_security(rows)
    result: list[DailyRow] = []
    for group in grouped.values():
        for i, row in enumerate(group):
            row.dod = calc_return(group, i, lags['DoD'])
            row.mom = calc_return(group, i, lags['MoM'])
            row.yoy = calc_return(group, i, lags['YoY'])
        result.extend(group)
    return result
