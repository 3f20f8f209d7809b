#!/usr/bin/env python3
"""Small CLI to bulk-load raw ticks from a CSV export into the tick store.

Usage: python scripts/import_ticks.py ticks.csv [TABLE]

Source headers are resolved through the analytics alias table (SYMBOL, PRICE,
DATE, ...) and written under the store's own columns, so imported rows sit
alongside ticks posted to /api/ticks. Values are loaded as text so thousands
separators and free-form dates reach the normalizer untouched.
"""
import sys
import logging

import pandas as pd

from core.normalizer import SchemaError
from data_pipeline import db
from data_pipeline.data_service import DataService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def import_csv(path: str, table: str | None = None, db_path: str | None = None) -> int:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip() for c in df.columns]
    if df.empty:
        logger.info(f"No rows in {path}")
        return 0
    return DataService.import_frame(df, table, db_path=db_path)


def main():
    if len(sys.argv) < 2:
        print("Usage: import_ticks.py <CSV> [TABLE]")
        sys.exit(2)
    table = sys.argv[2] if len(sys.argv) > 2 else None
    try:
        count = import_csv(sys.argv[1], table)
    except SchemaError as e:
        print(f"Cannot import {sys.argv[1]}: {e}")
        sys.exit(1)
    print(f"Imported {count} rows into {table or db.TICKS_TABLE}")


if __name__ == '__main__':
    main()
