import datetime as dt
import logging
from typing import Optional

from data_pipeline.data_service import DataService
from utils.utils import get_market_tz, now_in
from .validation_service import ValidationService

logger = logging.getLogger(__name__)


class IngestService:
    """
    Service for the scraper-facing write path.
    - extract_payload: Normalize a JSON body (object or list) to a list of dicts
    - ingest: Validate and append one store row per quote
    """

    @staticmethod
    def extract_payload(request):
        """
        Args:
            request (flask.Request): Incoming request
        Returns:
            list: Quote dicts (a single object is wrapped in a list)
        """
        data = request.get_json(silent=True)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    @staticmethod
    def ingest(items: list, now: Optional[dt.datetime] = None, db_path: Optional[str] = None) -> dict:
        """
        Append the valid quotes and report the rest.

        Returns:
            dict: {'status': 'success', 'rows_added': n, 'rejected': [{'index': i, 'message': ...}]}.
                A validation error when the payload is empty or no quote is usable.
        """
        error = ValidationService.validate_tick_payload(items)
        if error:
            return {'status': 'error', 'error_type': 'validation', 'message': error}

        accepted, rejected = [], []
        for index, item in enumerate(items):
            reason = ValidationService.validate_tick_item(item)
            if reason:
                rejected.append({'index': index, 'message': reason})
            else:
                accepted.append(item)
        if rejected:
            logger.warning(f"Skipping {len(rejected)} of {len(items)} quotes: {rejected}")
        if not accepted:
            return {'status': 'error', 'error_type': 'validation', 'message': "no_valid_items.",
                    'rejected': rejected}

        try:
            rows_added = DataService.append_ticks(accepted, now or now_in(get_market_tz()), db_path=db_path)
        except Exception as e:
            logger.error(f"Error appending ticks: {e}", exc_info=True)
            return {'status': 'error', 'error_type': 'internal', 'message': f"ingest_failed: {str(e)}"}
        return {'status': 'success', 'rows_added': rows_added, 'rejected': rejected}
