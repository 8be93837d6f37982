# RBN Feed Client
# Copyright (C) 2025 Peter Hirst (WU2C)
#
# Fetches "who hears me" skimmer spots from the dashboard's RBN proxy:
#   GET {base_url}/api/rbn?callsign=<call>&limit=<n>
# The proxy answers with a JSON array of spot records.

import logging
import requests
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_LIMIT = 100
REQUEST_TIMEOUT = 10  # seconds


class RetrievalError(Exception):
    """The feed could not be retrieved or decoded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RBNClient:
    """
    Thin HTTP client for the RBN spot proxy.

    Stateless apart from its configuration; safe to call from a worker thread.
    """

    ENDPOINT = "/api/rbn"

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    @property
    def url(self) -> str:
        return self.base_url + self.ENDPOINT

    def fetch_spots(self, callsign: str, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
        """
        Retrieve raw spot records for a callsign.

        Args:
            callsign: Station whose signal was heard
            limit: Maximum number of records to request

        Returns:
            List of raw record dicts (unvalidated)

        Raises:
            RetrievalError: transport failure, non-2xx status, or a body
                that is not a JSON array
        """
        params = {'callsign': callsign, 'limit': limit}
        headers = {
            'User-Agent': 'RBN-Overlay/1.0 (Amateur Radio Tool)',
            'Accept': 'application/json',
        }

        logger.info(f"[RBN] Fetching spots for {callsign}...")

        try:
            response = requests.get(self.url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise RetrievalError(f"RBN request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise RetrievalError(f"RBN API error: {response.status_code}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise RetrievalError(f"RBN response is not JSON: {e}") from e

        if not isinstance(data, list):
            raise RetrievalError(f"Unexpected RBN response format: {str(data)[:200]}")

        logger.info(f"[RBN] Received {len(data)} spots")
        return data
