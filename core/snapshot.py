"""Market map helpers: latest daily row per security and the day's top movers."""

from typing import Iterable

from core.models import DailyRow
from utils.constants import DEFAULT_MOVERS_LIMIT


def latest_per_security(rows: Iterable[DailyRow]) -> list[DailyRow]:
    """Latest row by TIMESTAMP for each security; the first seen row wins ties."""
    latest: dict[str, DailyRow] = {}
    for row in rows:
        if not row.security:
            continue
        current = latest.get(row.security)
        if current is None or row.sort_key > current.sort_key:
            latest[row.security] = row
    return list(latest.values())


def top_movers(rows: Iterable[DailyRow], limit: int = DEFAULT_MOVERS_LIMIT) -> list[DailyRow]:
    """Latest rows ordered by absolute DoD change, largest first."""
    snapshot = latest_per_security(rows)
    return sorted(snapshot, key=lambda r: abs(r.dod or 0.0), reverse=True)[:limit]
