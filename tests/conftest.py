import os
import sys
import tempfile
import datetime as dt

# Ensure workspace root is on sys.path so the packages import without installation
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Point the store at a throwaway file before any pipeline module is imported
_fd, _session_db = tempfile.mkstemp(suffix='.sqlite')
os.close(_fd)
os.environ['TICKS_DB_PATH'] = _session_db
os.environ['MARKET_TZ'] = 'UTC'
os.environ['VOLUME_MODE'] = 'max'

import pytest

from data_pipeline import db as dbmod

UTC = dt.timezone.utc
HEADER = ("SECURITY", "LAST", "TIME", "TIMESTAMP", "VOL", "BID", "ASK", "BID QTY", "ASK QTY")


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / 'ticks.sqlite')
    monkeypatch.setattr(dbmod, 'DB_PATH', path)
    dbmod.init_db(path)
    return path


@pytest.fixture
def abc_rows():
    """Three ABC ticks over two days, as native datetimes."""
    return [
        ("SECURITY", "LAST", "VOL", "TIMESTAMP"),
        ("ABC", 100.0, 500.0, dt.datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
        ("ABC", 102.0, 900.0, dt.datetime(2024, 1, 1, 9, 5, tzinfo=UTC)),
        ("ABC", 99.0, 400.0, dt.datetime(2024, 1, 2, 9, 0, tzinfo=UTC)),
    ]


def pytest_sessionfinish(session, exitstatus):
    try:
        os.remove(_session_db)
    except OSError:
        pass
