import datetime as dt
import logging
from typing import Optional

from core.intraday import build_intraday_timeline
from core.normalizer import SchemaError
from core.pipeline import compute_analytics
from core.snapshot import latest_per_security, top_movers
from data_pipeline.data_service import DataService
from utils.constants import DEFAULT_MOVERS_LIMIT
from utils.utils import get_market_tz, get_volume_mode

logger = logging.getLogger(__name__)


def _schema_failure(e: SchemaError) -> dict:
    logger.warning(f"Schema error: {e}")
    return {'status': 'error', 'error_type': 'schema', 'message': str(e)}


def _internal_failure(context: str, e: Exception) -> dict:
    logger.error(f"Error {context}: {e}", exc_info=True)
    return {'status': 'error', 'error_type': 'internal', 'message': f"{context}_failed: {str(e)}"}


class AnalyticsService:
    """
    Service coordinating request-scoped analytics over the raw tick store.
    Every call performs one full store read and recomputes from scratch.

    Outcomes are plain dicts:
    - success: {'status': 'success', 'data': [...], ...}
    - failure: {'status': 'error', 'error_type': 'schema'|'internal', 'message': ...}
    """

    @staticmethod
    def get_computed_analytics(view: str = 'all', db_path: Optional[str] = None) -> dict:
        """Daily closes with returns and signals; ``view='latest'`` keeps one row per security."""
        try:
            values = DataService.read_all_rows(db_path)
            result = compute_analytics(values, get_market_tz(), get_volume_mode())
        except SchemaError as e:
            return _schema_failure(e)
        except Exception as e:
            return _internal_failure('computing_analytics', e)

        for issue in result.issues:
            logger.warning(f"Row {issue.index} skipped: {issue.reason}")

        rows = latest_per_security(result.rows) if view == 'latest' else result.rows
        return {
            'status': 'success',
            'data': [r.to_dict() for r in rows],
            'skipped': len(result.issues),
        }

    @staticmethod
    def get_top_movers(limit: int = DEFAULT_MOVERS_LIMIT, db_path: Optional[str] = None) -> dict:
        try:
            values = DataService.read_all_rows(db_path)
            result = compute_analytics(values, get_market_tz(), get_volume_mode())
        except SchemaError as e:
            return _schema_failure(e)
        except Exception as e:
            return _internal_failure('computing_movers', e)
        return {'status': 'success', 'data': [r.to_dict() for r in top_movers(result.rows, limit)]}

    @staticmethod
    def get_intraday_timeline(security: str, now: Optional[dt.datetime] = None, db_path: Optional[str] = None):
        """Return (outcome dict, IntradayTimeline or None)."""
        logger.info(f"Fetching intraday for: {security}")
        try:
            values = DataService.read_all_rows(db_path)
            timeline = build_intraday_timeline(values, security, get_market_tz(), now=now)
        except SchemaError as e:
            return _schema_failure(e), None
        except Exception as e:
            return _internal_failure('building_intraday', e), None
        outcome = {'status': 'success', 'data': timeline.to_list(), 'day': timeline.day}
        return outcome, timeline

    @staticmethod
    def get_intraday_history(security: str, now: Optional[dt.datetime] = None, db_path: Optional[str] = None) -> dict:
        outcome, _ = AnalyticsService.get_intraday_timeline(security, now=now, db_path=db_path)
        return outcome
