"""
Base API client with common HTTP functionality.

Provides a requests session with default JSON headers, a configurable
retry loop with exponential backoff for timeouts, connection errors and
5xx responses, and context-manager cleanup. Quote clients inherit from
this class and add domain-specific calls.
"""

import logging
import time
from typing import Any, Dict, Optional

import requests

from dailyb3 import __version__

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base class for API clients.

    Subclasses set ``BASE_URL`` (or pass ``base_url``) and build on
    ``get()``/``post()``.

    Example:
        class ScannerClient(BaseAPIClient):
            BASE_URL = "https://scanner.example.com"

            def scan(self, payload: Dict[str, Any]) -> Dict[str, Any]:
                return self.post("/scan", json_data=payload).json()
    """

    BASE_URL: str = ""

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_retries: int = 0,
        retry_delay: float = 1.0,
        timeout: int = 10,
    ):
        """
        Initialize base API client.

        Args:
            base_url: Overrides the class BASE_URL
            max_retries: Retry attempts for transient errors (0 = single attempt)
            retry_delay: Base delay in seconds between retries
            timeout: Request timeout in seconds
        """
        if base_url:
            self.BASE_URL = base_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": f"dailyb3/{__version__}",
        })

        logger.debug(f"{self.__class__.__name__} initialized for {self.BASE_URL}")

    def _get_full_url(self, endpoint: str) -> str:
        if not self.BASE_URL:
            raise ValueError(f"{self.__class__.__name__} must set BASE_URL")
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.BASE_URL.rstrip('/')}{endpoint}"

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Exponential backoff: retry_delay * 2^attempt."""
        return self.retry_delay * (2 ** attempt)

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send a request, retrying transient failures.

        Server errors (5xx) are retried while attempts remain; the last
        5xx response is returned to the caller unchanged.

        Raises:
            requests.exceptions.RequestException: If the final attempt fails
        """
        url = self._get_full_url(endpoint)
        attempt = 0

        while True:
            logger.debug(f"{method} {url} (attempt {attempt + 1})")
            try:
                response = self.session.request(
                    method, url, params=params, json=json_data, timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                if attempt >= self.max_retries:
                    logger.error(f"{method} {url} failed: {e}")
                    raise
                delay = self._calculate_backoff_delay(attempt)
                logger.warning(
                    f"Network error: {e}. Retrying in {delay}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                time.sleep(delay)
                attempt += 1
                continue

            if response.status_code >= 500 and attempt < self.max_retries:
                delay = self._calculate_backoff_delay(attempt)
                logger.warning(
                    f"Server error ({response.status_code}). Retrying in {delay}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                time.sleep(delay)
                attempt += 1
                continue

            logger.debug(f"Response: {response.status_code}")
            return response

    def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> requests.Response:
        """Send a GET request."""
        return self._request("GET", endpoint, params=params)

    def post(
        self,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Send a POST request with a JSON body."""
        return self._request("POST", endpoint, params=params, json_data=json_data)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
        logger.debug(f"{self.__class__.__name__} closed")

    def __enter__(self) -> "BaseAPIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
