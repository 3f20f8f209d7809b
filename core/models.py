"""
Fixed-schema records shared by the analytics and intraday paths.

Every derived metric that can be undefined (returns, average volume, relative
volume) is an ``Optional[float]`` where ``None`` means "no value". A
legitimate 0.0 is never used to signal missing history.
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Optional


def _serialize_timestamp(value: Any) -> Any:
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    return value


@dataclass
class CanonicalRow:
    security: str
    last: float
    vol: float
    timestamp: Any
    instant: Optional[dt.datetime]
    day: str
    time: Optional[str] = None
    raw_time: Any = None


@dataclass
class DailyRow:
    """Daily close for one (security, calendar day)."""

    security: str
    last: float
    vol: float
    timestamp: Any
    instant: Optional[dt.datetime]
    day: str
    time: Optional[str] = None
    tick_time: float = 0.0

    dod: Optional[float] = None
    mom: Optional[float] = None
    yoy: Optional[float] = None

    avg_vol_30: Optional[float] = None
    rvol: Optional[float] = None
    liquidity_score: str = "LOW"
    momentum_signal: str = "NEUTRAL"
    hype_risk: str = "NORMAL"
    stable_trend: bool = False
    trade_score: int = 0

    @classmethod
    def from_canonical(cls, row: CanonicalRow, tick_time: float) -> "DailyRow":
        return cls(
            security=row.security,
            last=row.last,
            vol=row.vol,
            timestamp=row.timestamp,
            instant=row.instant,
            day=row.day,
            time=row.time,
            tick_time=tick_time,
        )

    @property
    def sort_key(self) -> float:
        return self.instant.timestamp() if self.instant is not None else 0.0

    def to_dict(self) -> dict:
        return {
            "SECURITY": self.security,
            "LAST": self.last,
            "VOL": self.vol,
            "TIMESTAMP": _serialize_timestamp(self.timestamp),
            "TIME": self.time,
            "DATE": self.day,
            "DoD": self.dod,
            "MoM": self.mom,
            "YoY": self.yoy,
            "avgVol30": self.avg_vol_30,
            "rvol": self.rvol,
            "liquidityScore": self.liquidity_score,
            "momentumSignal": self.momentum_signal,
            "hypeRisk": self.hype_risk,
            "stableTrend": self.stable_trend,
            "tradeScore": self.trade_score,
        }


@dataclass
class IntradayPoint:
    time: str
    price: float
    volume: float
    spread: float = 0.0
    imbalance: float = 0.0
    bid: float = 0.0
    ask: float = 0.0
    bid_qty: float = 0.0
    ask_qty: float = 0.0
    sort_value: float = 0.0
    # Set on the point appended to extend a stale series to "now"
    synthetic: bool = False

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "price": self.price,
            "volume": self.volume,
            "spread": self.spread,
            "imbalance": self.imbalance,
            "bid": self.bid,
            "ask": self.ask,
            "bidQty": self.bid_qty,
            "askQty": self.ask_qty,
            "synthetic": self.synthetic,
        }


@dataclass
class IntradayTimeline:
    security: str
    day: Optional[str] = None
    points: list[IntradayPoint] = field(default_factory=list)

    def to_list(self) -> list[dict]:
        return [p.to_dict() for p in self.points]
