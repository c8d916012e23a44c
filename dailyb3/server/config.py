"""Configuration management for the FastAPI server.

Settings load from environment variables prefixed with ``DAILYB3_``,
with defaults suitable for local use.
"""

import logging
import os
from pathlib import Path

from pydantic_settings import BaseSettings

from dailyb3.config import QuoteConfig
from dailyb3.utils.dates import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration settings.

    Attributes:
        app_name: Application name
        version: Application version
        debug: Debug mode flag
        database_path: SQLite database file
        cors_origins: List of allowed CORS origins
        host: Server host address
        port: Server port number
        timezone: Timezone for calendar-day comparisons and timestamps
        quote_*: Live quote source settings
        refresh_max_workers: Concurrent quote fetches during a bulk refresh
        refresh_interval_minutes: Scheduled bulk refresh interval (0 disables)
    """

    app_name: str = "dailyb3 Watchlist API"
    version: str = "1.0.0"
    debug: bool = False

    # Database configuration
    database_path: str = "~/.dailyb3/watchlist.db"

    # CORS configuration - allow local development origins
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    timezone: str = DEFAULT_TIMEZONE

    # Quote source
    quote_base_url: str = "https://scanner.tradingview.com"
    quote_market: str = "brazil"
    quote_exchange: str = "BMFBOVESPA"
    quote_timeout: int = 10
    quote_max_retries: int = 0

    # Refresh
    refresh_max_workers: int = 8
    refresh_interval_minutes: int = 0

    class Config:
        """Pydantic configuration."""
        env_prefix = "DAILYB3_"
        case_sensitive = False

    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL for database_path."""
        return f"sqlite:///{os.path.expanduser(self.database_path)}"

    def get_database_path(self) -> Path:
        """Expanded database path."""
        return Path(os.path.expanduser(self.database_path))

    def quote_config(self) -> QuoteConfig:
        """Build the quote client configuration."""
        return QuoteConfig(
            base_url=self.quote_base_url,
            market=self.quote_market,
            exchange=self.quote_exchange,
            timeout=self.quote_timeout,
            max_retries=self.quote_max_retries,
        )


# Global settings instance
settings = Settings()
