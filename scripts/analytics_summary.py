#!/usr/bin/env python3
"""Print a sample of the computed analytics from the tick store.

Usage: python scripts/analytics_summary.py [SECURITY]

Picks the requested security (or the first row that has a DoD value) and
prints its latest daily close, signals and intraday point count.
"""
import sys
import logging

from services.analytics_service import AnalyticsService
from utils.formatters import DataFormatter

logging.basicConfig(level=logging.INFO)


def pick_sample(rows, security=None):
    if security:
        matches = [r for r in rows if r['SECURITY'] == security.strip().upper()]
        return matches[-1] if matches else None
    return next((r for r in rows if r['DoD'] is not None), rows[0] if rows else None)


def main():
    outcome = AnalyticsService.get_computed_analytics()
    if outcome['status'] == 'error':
        print(f"Error ({outcome['error_type']}): {outcome['message']}")
        sys.exit(1)

    rows = outcome['data']
    print(f"Total rows processed: {len(rows)} (skipped {outcome['skipped']})")
    sample = pick_sample(rows, sys.argv[1] if len(sys.argv) > 1 else None)
    if sample is None:
        print("No data yet")
        return

    for label, value in DataFormatter.format_daily_row(sample).items():
        print(f"{label:>14}: {value}")

    intraday = AnalyticsService.get_intraday_history(sample['SECURITY'])
    if intraday['status'] == 'success':
        print(f"Intraday points for {sample['SECURITY']} on {intraday['day']}: {len(intraday['data'])}")

    movers = AnalyticsService.get_top_movers()
    table = DataFormatter.format_rows_for_display(movers.get('data'))
    if table is not None:
        print("\n--- Top Movers ---")
        print(table[['Date', 'Last', 'DoD', 'Relative Vol', 'Momentum']].to_string())


if __name__ == '__main__':
    main()
