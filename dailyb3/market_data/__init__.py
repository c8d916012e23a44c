"""
Market data package.

- quote_client: live price and 200-day moving average per ticker
"""

from dailyb3.market_data.quote_client import LiveQuote, QuoteClient

__all__ = [
    "LiveQuote",
    "QuoteClient",
]
