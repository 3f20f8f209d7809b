from utils.constants import DEFAULT_MOVERS_LIMIT


class ValidationService:
    """
    Service for validating request parameters and ingestion payloads.
    Each validator returns an error message string if invalid, else None.
    """

    MAX_SECURITY_LENGTH = 32
    MAX_MOVERS = 100

    @staticmethod
    def validate_security(security):
        if not security or not str(security).strip():
            return "please_enter_a_security_symbol."
        if len(str(security).strip()) > ValidationService.MAX_SECURITY_LENGTH:
            return f"security_symbol_too_long: {security}"
        return None

    @staticmethod
    def validate_view(view):
        if view not in ('all', 'latest'):
            return f"invalid_view_selected: {view}"
        return None

    @staticmethod
    def parse_limit(raw):
        """Return (limit, error). Blank input falls back to the default."""
        if raw is None or str(raw).strip() == '':
            return DEFAULT_MOVERS_LIMIT, None
        try:
            limit = int(raw)
        except (ValueError, TypeError):
            return None, f"invalid_limit: {raw}"
        if not (1 <= limit <= ValidationService.MAX_MOVERS):
            return None, f"limit_must_be_between_1_and_{ValidationService.MAX_MOVERS}."
        return limit, None

    @staticmethod
    def validate_tick_payload(items):
        """
        Validate a list of scraped quote dicts as a whole.

        Args:
            items (list): Payload normalized to a list

        Returns:
            str or None: Error message if invalid, else None
        """
        if not items:
            return "empty_payload."
        return None

    @staticmethod
    def validate_tick_item(item):
        """Per-quote check; a bad quote is skipped without rejecting the batch."""
        if not isinstance(item, dict):
            return "item_is_not_an_object."
        if not any(str(item.get(k) or '').strip() for k in ('security', 'ticker', 'symbol')):
            return "item_missing_security."
        return None
