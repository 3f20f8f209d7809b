"""Analytics pipeline: normalize -> aggregate daily closes -> returns -> signals."""

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Sequence

from core.daily_aggregator import aggregate_daily_closes
from core.models import DailyRow
from core.normalizer import AGGREGATION_REQUIRED, RowIssue, normalize_rows
from core.returns import compute_returns
from core.signals import compute_market_signals


@dataclass
class AnalyticsResult:
    rows: list[DailyRow] = field(default_factory=list)
    issues: list[RowIssue] = field(default_factory=list)


def compute_analytics(values: Sequence[Sequence[Any]], tz: dt.tzinfo, volume_mode: str = "max") -> AnalyticsResult:
    """Run the full daily analytics over raw store rows (header first).

    Every call builds its own grouping structures; the input rows are only read.

    Raises:
        SchemaError: if SECURITY, LAST or TIMESTAMP is missing from the header.
    """
    canonical, issues = normalize_rows(values, tz, AGGREGATION_REQUIRED)
    daily = aggregate_daily_closes(canonical, tz, volume_mode)
    with_returns = compute_returns(daily)
    return AnalyticsResult(rows=compute_market_signals(with_returns), issues=issues)
