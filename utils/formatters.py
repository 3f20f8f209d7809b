"""Utility functions for data formatting"""

import pandas as pd

NO_VALUE = "N/A"


class DataFormatter:
    """Utility class for formatting computed records for display.

    "No value" (None/NaN) always renders as N/A, never as 0.
    """

    @staticmethod
    def format_percentage(value, decimal_places=2):
        """Format a decimal value as percentage"""
        if value is None or pd.isna(value):
            return NO_VALUE
        return f"{value:.{decimal_places}%}"

    @staticmethod
    def format_number(value, decimal_places=2):
        """Format a number with specified decimal places"""
        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)) or pd.isna(value):
            return NO_VALUE
        return f"{value:.{decimal_places}f}"

    @staticmethod
    def format_volume(value):
        if value is None or not isinstance(value, (int, float)) or pd.isna(value):
            return NO_VALUE
        return f"{value:,.0f}"

    @staticmethod
    def format_daily_row(row):
        """Display strings for one DailyRow wire record"""
        return {
            'Security': row.get('SECURITY'),
            'Date': row.get('DATE'),
            'Last': DataFormatter.format_number(row.get('LAST')),
            'DoD': DataFormatter.format_percentage(row.get('DoD')),
            'MoM': DataFormatter.format_percentage(row.get('MoM')),
            'YoY': DataFormatter.format_percentage(row.get('YoY')),
            'Avg Vol 30': DataFormatter.format_volume(row.get('avgVol30')),
            'Relative Vol': DataFormatter.format_number(row.get('rvol')),
            'Liquidity': row.get('liquidityScore'),
            'Momentum': row.get('momentumSignal'),
            'Hype Risk': row.get('hypeRisk'),
            'Stable Trend': row.get('stableTrend'),
            'Trade Score': row.get('tradeScore'),
        }

    @staticmethod
    def format_rows_for_display(rows):
        """Format a list of DailyRow wire records into a display DataFrame"""
        if not rows:
            return None
        return pd.DataFrame([DataFormatter.format_daily_row(r) for r in rows]).set_index('Security')
