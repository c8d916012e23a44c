"""Configuration for the live quote source."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class QuoteConfig:
    """
    Configuration for the quote client.

    Attributes:
        base_url: Base URL of the TradingView scanner API
        market: Scanner market path segment
        exchange: Exchange prefix for tickers (e.g., "BMFBOVESPA:PETR4")
        timeout: Request timeout in seconds
        max_retries: Retry attempts for transient failures (0 disables retries)
        retry_delay: Initial delay between retries (seconds)
    """

    base_url: str = "https://scanner.tradingview.com"
    market: str = "brazil"
    exchange: str = "BMFBOVESPA"
    timeout: int = 10
    max_retries: int = 0
    retry_delay: float = 1.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")

        if not self.market:
            raise ValueError("Market cannot be empty")

        if not self.exchange:
            raise ValueError("Exchange cannot be empty")

        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")

        if self.max_retries < 0:
            raise ValueError("Max retries cannot be negative")

        if self.retry_delay <= 0:
            raise ValueError("Retry delay must be positive")

    @classmethod
    def from_env(cls, prefix: str = "DAILYB3_QUOTE_") -> "QuoteConfig":
        """
        Load configuration from environment variables.

        Reads ``<prefix>BASE_URL``, ``MARKET``, ``EXCHANGE``, ``TIMEOUT``,
        ``MAX_RETRIES`` and ``RETRY_DELAY``; unset variables keep defaults.

        Args:
            prefix: Environment variable prefix

        Returns:
            QuoteConfig instance
        """

        def _env(name: str) -> Optional[str]:
            return os.getenv(f"{prefix}{name}")

        defaults = cls()
        return cls(
            base_url=_env("BASE_URL") or defaults.base_url,
            market=_env("MARKET") or defaults.market,
            exchange=_env("EXCHANGE") or defaults.exchange,
            timeout=int(_env("TIMEOUT") or defaults.timeout),
            max_retries=int(_env("MAX_RETRIES") or defaults.max_retries),
            retry_delay=float(_env("RETRY_DELAY") or defaults.retry_delay),
        )
