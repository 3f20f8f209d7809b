"""Unified utility module for environment-driven settings"""

import datetime as dt
import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from utils.constants import VOLUME_MODES

DEFAULT_MARKET_TZ = 'Africa/Dar_es_Salaam'
DEFAULT_VOLUME_MODE = 'max'

logger = logging.getLogger(__name__)


def get_market_tz(name: str | None = None) -> dt.tzinfo:
    """Resolve the market timezone used for calendar days and HH:MM labels.

    Falls back to UTC when the configured zone is unknown.
    """
    name = (name or os.environ.get("MARKET_TZ", DEFAULT_MARKET_TZ)).strip()
    if name.upper() == "UTC":
        return dt.timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown MARKET_TZ {name!r}; falling back to UTC")
        return dt.timezone.utc


def get_volume_mode(value: str | None = None) -> str:
    mode = (value or os.environ.get("VOLUME_MODE", DEFAULT_VOLUME_MODE)).strip().lower()
    if mode not in VOLUME_MODES:
        logger.warning(f"Unknown VOLUME_MODE {mode!r}; using {DEFAULT_VOLUME_MODE}")
        return DEFAULT_VOLUME_MODE
    return mode


def now_in(tz: dt.tzinfo) -> dt.datetime:
    return dt.datetime.now(tz)
