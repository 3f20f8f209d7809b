import datetime as dt
import logging
from typing import Optional

import pandas as pd

from . import db
from .ingest import append_ticks, import_frame

logger = logging.getLogger(__name__)


class DataService:
    """
    Facade over the raw tick store.
    - read_all_rows: full read, header row first, insertion order
    - append_ticks: one row per ingested tick
    - import_frame: bulk load of an exported table under the store columns
    """

    @staticmethod
    def initialize(db_path: Optional[str] = None):
        db.init_db(db_path)

    @staticmethod
    def read_all_rows(db_path: Optional[str] = None) -> list[tuple]:
        rows = db.fetch_rows(db_path=db_path)
        logger.info(f"Read {max(len(rows) - 1, 0)} raw rows from {db.TICKS_TABLE}")
        return rows

    @staticmethod
    def append_ticks(items: list[dict], now: dt.datetime, db_path: Optional[str] = None) -> int:
        # Ensure the table exists before the first ingest
        db.init_db(db_path)
        return append_ticks(items, now, db_path=db_path)

    @staticmethod
    def import_frame(df: pd.DataFrame, table: Optional[str] = None, db_path: Optional[str] = None) -> int:
        db.init_db(db_path, table)
        return import_frame(df, table or db.TICKS_TABLE, db_path=db_path)
