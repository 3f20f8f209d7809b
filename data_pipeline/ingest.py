import datetime as dt
import logging
from typing import Any, Optional

import pandas as pd

from core.normalizer import AGGREGATION_REQUIRED, locate_columns
from utils.constants import STORE_COLUMNS

from .db import TICKS_TABLE, append_many

logger = logging.getLogger(__name__)


def _first(item: dict, *keys: str) -> Any:
    for k in keys:
        if item.get(k):
            return item[k]
    return None


def clean_store_value(value: Any) -> Any:
    """Comma-strip and trim a numeric payload value; falsy values become 0."""
    if not value:
        return 0
    return str(value).replace(",", "").strip()


def clean_tick_payload(item: dict, now: dt.datetime) -> tuple:
    """Map one scraped quote onto a store row ordered as STORE_COLUMNS."""
    security = str(_first(item, "security", "ticker", "symbol") or "").strip().upper()
    return (
        security,
        clean_store_value(_first(item, "last", "price")),
        item.get("time") or now.strftime("%H:%M:%S"),
        now,
        clean_store_value(_first(item, "vol", "volume")),
        clean_store_value(item.get("bid")),
        clean_store_value(_first(item, "ask", "offer")),
        clean_store_value(item.get("bidQty")),
        clean_store_value(item.get("askQty")),
    )


def append_ticks(items: list[dict], now: dt.datetime, table: Optional[str] = None, db_path: Optional[str] = None) -> int:
    """
    Append one store row per payload item, all stamped with ``now``.
    Returns number of rows written.
    """
    rows = [clean_tick_payload(item, now) for item in items]
    if not rows:
        logger.info("No ticks to append")
        return 0
    written = append_many(table or TICKS_TABLE, STORE_COLUMNS, rows, db_path=db_path)
    logger.info(f"Appended {written} ticks")
    return written


def import_frame(df: pd.DataFrame, table: Optional[str] = None, db_path: Optional[str] = None) -> int:
    """
    Append an exported tick table to the store.

    Source headers are resolved through the normalizer's alias table
    (Symbol, Price, Date, ...) and written under STORE_COLUMNS. Fields with no
    matching source column are stored as NULL. Values are kept as they come so
    thousands separators and free-form dates reach the normalizer untouched.

    Raises:
        SchemaError: if SECURITY, LAST or TIMESTAMP has no matching column.
    """
    columns = locate_columns(list(df.columns), AGGREGATION_REQUIRED)
    if df.empty:
        logger.info("No rows to import")
        return 0
    rows = [
        tuple(None if columns[name] is None else raw[columns[name]] for name in STORE_COLUMNS)
        for raw in df.itertuples(index=False, name=None)
    ]
    written = append_many(table or TICKS_TABLE, STORE_COLUMNS, rows, db_path=db_path)
    logger.info(f"Imported {written} ticks from {len(df.columns)} source columns")
    return written
