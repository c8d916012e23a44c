"""Derived metrics for watched stocks.

All functions here are pure: upside, deviation from the 200-day moving
average, checklist score, and the display signals built on them.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from dailyb3.market_data.quote_client import LiveQuote

from .models import Checklist, Stock

# Upside above this percentage is highlighted
UPSIDE_HIGHLIGHT_PERCENT = 20.0

STATUSINVEST_URL = "https://statusinvest.com.br/acoes/{symbol}"
INSIDERS_URL = "https://www.fundamentus.com.br/insiders.php?papel={symbol}&tipo=1"
RENT_URL = (
    "https://www.investsite.com.br/graficos_aluguel_posicao.php?cod_negociacao={symbol}"
)


@dataclass
class LiveDerived:
    """Live fields merged into a stock after a quote fetch.

    Attributes:
        current_price: Quoted price, 0 when the quote had none
        media200: 200-day moving average as returned by the quote source
        upside: % gap to target price, None without a valid price or target
        average_percent200: % deviation from media200, None without a valid price
    """

    current_price: float
    media200: Optional[float] = None
    upside: Optional[float] = None
    average_percent200: Optional[float] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            "currentPrice": self.current_price,
            "media200": self.media200,
            "upside": self.upside,
            "averagePercent200": self.average_percent200,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def has_valid_price(price: Any) -> bool:
    """True if price is a finite number greater than zero."""
    return _is_number(price) and math.isfinite(price) and price > 0


def compute_upside(target_price: Any, current_price: Any) -> Optional[float]:
    """
    Percentage gap between target and current price.

    Returns:
        (target - current) / current * 100, or None if the target is not a
        number or the current price is not finite and positive
    """
    if not has_valid_price(current_price) or not _is_number(target_price):
        return None
    return (target_price - current_price) / current_price * 100


def compute_average_percent200(
    current_price: Any, media200: Optional[float]
) -> Optional[float]:
    """Percentage deviation of the current price from the 200-day average.

    A missing average counts as 0.
    """
    if not has_valid_price(current_price):
        return None
    return (current_price - (media200 or 0)) * 100 / current_price


def compute_live_derived(
    old_stock: Union[Stock, Mapping[str, Any]],
    live_quote: Optional[LiveQuote],
) -> LiveDerived:
    """
    Compute the live fields of a stock from a fresh quote.

    Args:
        old_stock: The stock (or pending document fields) being refreshed;
            only its ``targetPrice`` is read
        live_quote: Quote from the quote source, None if unavailable

    Returns:
        LiveDerived with price, media200, upside and averagePercent200

    Example:
        >>> quote = LiveQuote(symbol="ABC3", price=100.0, media200=90.0)
        >>> derived = compute_live_derived({"targetPrice": 120.0}, quote)
        >>> derived.upside, derived.average_percent200
        (20.0, 10.0)
    """
    if isinstance(old_stock, Stock):
        target_price = old_stock.target_price
    else:
        target_price = old_stock.get("targetPrice")

    current_price = (live_quote.price if live_quote else None) or 0
    media200 = live_quote.media200 if live_quote else None

    return LiveDerived(
        current_price=current_price,
        media200=media200,
        upside=compute_upside(target_price, current_price),
        average_percent200=compute_average_percent200(current_price, media200),
    )


def compute_score(checklist: Union[Checklist, Mapping[str, Any]]) -> int:
    """Count the checklist flags that are True."""
    if isinstance(checklist, Checklist):
        values = checklist.model_dump().values()
    else:
        values = checklist.values()
    return sum(1 for value in values if value is True)


def average_signal(stock: Stock) -> bool:
    """True when the 200-day deviation is outside the stock's thresholds."""
    deviation = stock.average_percent200 or 0
    return (
        deviation > stock.distance_positive
        or deviation < -1 * stock.distance_negative
    )


def upside_signal(stock: Stock) -> bool:
    """True when upside exceeds UPSIDE_HIGHLIGHT_PERCENT."""
    return (stock.upside or 0) > UPSIDE_HIGHLIGHT_PERCENT


def reference_links(stock: Stock) -> Dict[str, str]:
    """External research pages for a stock."""
    return {
        "statusinvest": STATUSINVEST_URL.format(symbol=stock.symbol),
        "insiders": INSIDERS_URL.format(symbol=stock.symbol),
        "rent": stock.rent_url or RENT_URL.format(symbol=stock.symbol),
    }
