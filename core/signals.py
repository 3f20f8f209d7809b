"""
Signal Engine - adaptive trading signals from relative volume and momentum.

All thresholds and score weights live in ``utils.constants``. The labels are
a heuristic composite rather than a statistical model; they are reproduced
exactly so downstream badges stay comparable.
"""

from typing import Iterable, Optional

import numpy as np

from core.models import DailyRow
from core.returns import group_by_security
from utils.constants import (
    AVG_VOLUME_WINDOW,
    BREAKOUT_RVOL,
    HYPE_DOD,
    HYPE_RVOL_LOW,
    LIQUIDITY_HIGH,
    LIQUIDITY_MEDIUM,
    MOMENTUM_RVOL_CONFIRM,
    MOMENTUM_RVOL_WEAK,
    STABLE_DOD_MAX,
    STABLE_RVOL,
    TRADE_SCORE_WEIGHTS,
)


def trailing_average_volume(volumes: list[float], index: int, window: int = AVG_VOLUME_WINDOW) -> float:
    start = max(0, index - window + 1)
    return float(np.mean(volumes[start:index + 1]))


def relative_volume(volume: float, avg_volume: float) -> Optional[float]:
    if avg_volume > 0:
        return volume / avg_volume
    return None


def liquidity_score(avg_volume: float) -> str:
    if avg_volume >= LIQUIDITY_HIGH:
        return "HIGH"
    if avg_volume >= LIQUIDITY_MEDIUM:
        return "MEDIUM"
    return "LOW"


def momentum_signal(dod: float, rvol: float) -> str:
    if dod > 0 and rvol > MOMENTUM_RVOL_CONFIRM:
        return "CONFIRMED_UP"
    if dod > 0 and rvol <= MOMENTUM_RVOL_WEAK:
        return "WEAK_UP"
    if dod < 0 and rvol > MOMENTUM_RVOL_CONFIRM:
        return "STRONG_SELL"
    return "NEUTRAL"


def hype_risk(dod: float, rvol: float) -> str:
    if dod > HYPE_DOD and rvol < HYPE_RVOL_LOW:
        return "HYPE_RISK"
    if dod > HYPE_DOD and rvol > BREAKOUT_RVOL:
        return "BREAKOUT"
    return "NORMAL"


def stable_trend(dod: float, rvol: float) -> bool:
    return 0 <= dod <= STABLE_DOD_MAX and rvol > STABLE_RVOL


def trade_score(row: DailyRow) -> int:
    score = 0
    if row.liquidity_score == "HIGH":
        score += TRADE_SCORE_WEIGHTS['liquidity_high']
    if row.momentum_signal == "CONFIRMED_UP":
        score += TRADE_SCORE_WEIGHTS['confirmed_up']
    if row.stable_trend:
        score += TRADE_SCORE_WEIGHTS['stable_trend']
    if row.hype_risk == "HYPE_RISK":
        score += TRADE_SCORE_WEIGHTS['hype_risk']
    if row.momentum_signal == "STRONG_SELL":
        score += TRADE_SCORE_WEIGHTS['strong_sell']
    return score


def compute_market_signals(rows: Iterable[DailyRow]) -> list[DailyRow]:
    """Fill avgVol30, rvol and the categorical signals for every row.

    Rows are grouped per security and sorted by TIMESTAMP, so the window only
    ever looks backwards in time regardless of input order.
    """
    grouped = group_by_security(rows)
    result: list[DailyRow] = []
    for group in grouped.values():
        volumes = [r.vol for r in group]
        for i, row in enumerate(group):
            row.avg_vol_30 = trailing_average_volume(volumes, i)
            row.rvol = relative_volume(row.vol, row.avg_vol_30)
            row.liquidity_score = liquidity_score(row.avg_vol_30)

            # Absent DoD/rvol compare as zero
            dod = row.dod or 0.0
            rvol = row.rvol or 0.0
            row.momentum_signal = momentum_signal(dod, rvol)
            row.hype_risk = hype_risk(dod, rvol)
            row.stable_trend = stable_trend(dod, rvol)
            row.trade_score = trade_score(row)
        result.extend(group)
    return result
