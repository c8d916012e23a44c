"""
Live quote client for B3 tickers.

Queries the TradingView scanner API for a ticker's last close and its
200-day simple moving average.

Request (POST {base_url}/{market}/scan):
    {"symbols": {"tickers": ["BMFBOVESPA:PETR4"], "query": {"types": []}},
     "columns": ["close", "SMA200"]}

Response:
    {"totalCount": 1, "data": [{"s": "BMFBOVESPA:PETR4", "d": [38.12, 36.4]}]}
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

import requests

from dailyb3.api.base_client import BaseAPIClient
from dailyb3.config import QuoteConfig
from dailyb3.exceptions import QuoteFetchError

logger = logging.getLogger(__name__)

QUOTE_COLUMNS = ["close", "SMA200"]


@dataclass
class LiveQuote:
    """
    Current quote for one ticker.

    Attributes:
        symbol: Uppercase ticker symbol
        price: Last price, None if the source had none
        media200: 200-day simple moving average, None if unavailable
    """

    symbol: str
    price: Optional[float] = None
    media200: Optional[float] = None


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


class QuoteClient(BaseAPIClient):
    """
    Client for live B3 quotes.

    One request per call, no caching. Failures raise QuoteFetchError.
    """

    def __init__(self, config: Optional[QuoteConfig] = None):
        """
        Initialize client with configuration.

        Args:
            config: QuoteConfig instance (defaults if omitted)
        """
        config = config or QuoteConfig()
        super().__init__(
            base_url=config.base_url,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            timeout=config.timeout,
        )
        self.config = config

    def get_quote(self, symbol: str) -> LiveQuote:
        """
        Fetch the live price and 200-day moving average for a ticker.

        Args:
            symbol: Ticker symbol (e.g., "PETR4"); normalized to uppercase

        Returns:
            LiveQuote for the symbol

        Raises:
            ValueError: If symbol is empty or not alphanumeric
            QuoteFetchError: If the request fails or the ticker is unknown
        """
        if not symbol or not isinstance(symbol, str):
            raise ValueError(f"Invalid symbol: {symbol}")

        symbol = symbol.upper().strip()
        if not symbol.isalnum():
            raise ValueError(f"Symbol must be alphanumeric: {symbol}")

        ticker = f"{self.config.exchange}:{symbol}"
        payload = {
            "symbols": {"tickers": [ticker], "query": {"types": []}},
            "columns": QUOTE_COLUMNS,
        }

        logger.info(f"Fetching quote for {symbol}")

        try:
            response = self.post(f"/{self.config.market}/scan", json_data=payload)

            if response.status_code == 429:
                raise QuoteFetchError(f"Rate limit exceeded fetching {symbol}")

            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise QuoteFetchError(f"Quote request failed for {symbol}: {e}") from e
        except ValueError as e:
            raise QuoteFetchError(f"Invalid JSON response for {symbol}: {e}") from e

        return self._parse_scan_response(data, symbol, ticker)

    def _parse_scan_response(self, data: Any, symbol: str, ticker: str) -> LiveQuote:
        """
        Parse a scanner response into a LiveQuote.

        Raises:
            QuoteFetchError: If the response has no row for the ticker
        """
        rows = data.get("data") if isinstance(data, dict) else None
        if not rows:
            raise QuoteFetchError(f"No quote data for {symbol}")
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise QuoteFetchError(f"Malformed quote rows for {symbol}")

        row = next((r for r in rows if r.get("s") == ticker), rows[0])
        values = row.get("d") or []
        if not isinstance(values, list):
            raise QuoteFetchError(f"Malformed quote values for {symbol}")

        quote = LiveQuote(
            symbol=symbol,
            price=_to_float(values[0]) if len(values) > 0 else None,
            media200=_to_float(values[1]) if len(values) > 1 else None,
        )
        logger.debug(f"Quote for {symbol}: price={quote.price}, media200={quote.media200}")
        return quote
