import datetime as dt
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Optional

DB_PATH = os.environ.get("TICKS_DB_PATH", os.path.join(os.getcwd(), "ticks.sqlite"))
TICKS_TABLE = os.environ.get("TICKS_TABLE", "ticks")


def _adapt_datetime(value: dt.datetime) -> str:
    return value.isoformat(" ")


def _convert_datetime(raw: bytes) -> Any:
    # Values that are not ISO dates or timestamps come back as text for the normalizer
    text = raw.decode("utf-8", errors="replace")
    try:
        return dt.datetime.fromisoformat(text)
    except ValueError:
        return text


sqlite3.register_adapter(dt.datetime, _adapt_datetime)
# DATE and DATETIME columns get the same lenient read as TIMESTAMP
for _decltype in ("TIMESTAMP", "DATETIME", "DATE"):
    sqlite3.register_converter(_decltype, _convert_datetime)


def init_db(db_path: Optional[str] = None, table: Optional[str] = None):
    path = db_path or DB_PATH
    Path(os.path.dirname(os.path.abspath(path))).mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        cur = conn.cursor()
        # Raw ticks, one row per ingested quote; never updated
        cur.execute(
            f"""
            CREATE TABLE IF NOT EXISTS "{table or TICKS_TABLE}" (
                "SECURITY" TEXT,
                "LAST" REAL,
                "TIME" TEXT,
                "TIMESTAMP" TIMESTAMP,
                "VOL" REAL,
                "BID" REAL,
                "ASK" REAL,
                "BID QTY" REAL,
                "ASK QTY" REAL
            )
            """
        )
        conn.commit()


@contextmanager
def get_conn(db_path: Optional[str] = None):
    path = db_path or DB_PATH
    conn = sqlite3.connect(path, detect_types=sqlite3.PARSE_DECLTYPES)
    try:
        yield conn
    finally:
        conn.close()


def append_many(table: str, columns: Iterable[str], rows: Iterable[Iterable], db_path: Optional[str] = None) -> int:
    cols = list(columns)
    placeholders = ",".join(["?"] * len(cols))
    quoted = ",".join(f'"{c}"' for c in cols)
    sql = f'INSERT INTO "{table}" ({quoted}) VALUES ({placeholders})'
    rows = [tuple(r) for r in rows]
    with get_conn(db_path) as conn:
        conn.executemany(sql, rows)
        conn.commit()
    return len(rows)


def fetch_rows(table: Optional[str] = None, db_path: Optional[str] = None) -> list[tuple]:
    """All rows of ``table`` in insertion order, header (column names) first."""
    with get_conn(db_path) as conn:
        cur = conn.execute(f'SELECT * FROM "{table or TICKS_TABLE}" ORDER BY rowid')
        header = tuple(d[0] for d in cur.description)
        return [header] + cur.fetchall()
