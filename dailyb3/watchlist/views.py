"""Filtering and sorting over an in-memory list of stocks."""

import logging
import unicodedata
from functools import cmp_to_key
from typing import Any, Iterable, List, Mapping, Optional

from pydantic.alias_generators import to_camel

from dailyb3.utils.dates import TimezoneLike, is_same_calendar_day, parse_timestamp

from .models import Stock

logger = logging.getLogger(__name__)

# Fields compared by calendar day instead of by substring
DATE_FIELDS = {"date_last_check"}


def resolve_field(name: str) -> str:
    """
    Map a stock field name to its model attribute.

    Accepts the stored key ("dateLastCheck") or the attribute name
    ("date_last_check").

    Raises:
        ValueError: If the name is not a stock field
    """
    if name in Stock.model_fields:
        return name
    for attr in Stock.model_fields:
        if to_camel(attr) == name:
            return attr
    raise ValueError(f"Unknown stock field: {name}")


def field_alias(name: str) -> str:
    """Stored key for a stock field name."""
    return to_camel(resolve_field(name))


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _matches(stock: Stock, filters: Mapping[str, Any], tz: TimezoneLike) -> bool:
    for key, expected in filters.items():
        if expected is None:
            continue
        attr = resolve_field(key)
        actual = getattr(stock, attr)
        if attr in DATE_FIELDS:
            if not is_same_calendar_day(actual, expected, tz):
                return False
        elif _as_text(expected).lower() not in _as_text(actual).lower():
            return False
    return True


def apply_filters(
    stocks: Iterable[Stock],
    filters: Optional[Mapping[str, Any]],
    tz: TimezoneLike = None,
) -> List[Stock]:
    """
    Filter stocks by a partial field -> value map.

    Every non-None filter must match (AND). Values match as
    case-insensitive substrings, except date fields, which match on the
    calendar day in ``tz`` regardless of time of day. An empty map keeps
    every stock in its original order.

    Args:
        stocks: Stocks to filter
        filters: Field name (stored key or attribute) to expected value
        tz: Timezone for calendar-day comparison

    Returns:
        New list with the matching stocks

    Raises:
        ValueError: If a filter names an unknown field
    """
    stocks = list(stocks)
    if not filters:
        return stocks
    return [stock for stock in stocks if _matches(stock, filters, tz)]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _collation_key(text: str) -> tuple:
    # Accent- and case-insensitive first, then lowercase before uppercase
    stripped = "".join(
        ch for ch in unicodedata.normalize("NFD", text) if not unicodedata.combining(ch)
    )
    return (stripped.casefold(), text.casefold(), text.swapcase())


def _compare(a: Any, b: Any) -> int:
    if _is_number(a) and _is_number(b):
        # Descending
        return (b > a) - (b < a)

    if isinstance(a, str) and isinstance(b, str):
        date_a = parse_timestamp(a)
        date_b = parse_timestamp(b)
        if date_a is not None and date_b is not None:
            return (date_a > date_b) - (date_a < date_b)
        key_a, key_b = _collation_key(a), _collation_key(b)
        return (key_a > key_b) - (key_a < key_b)

    return 0


def sort_stocks(stocks: List[Stock], field: str) -> List[Stock]:
    """
    Sort stocks in place by one field.

    Numbers sort descending. Strings sort ascending by date when both parse
    as dates, otherwise alphabetically. Pairs with a missing or mixed-type
    value compare equal and keep their relative order.

    Args:
        stocks: List to sort (mutated)
        field: Field name (stored key or attribute)

    Returns:
        The same list, sorted

    Raises:
        ValueError: If the field is unknown
    """
    attr = resolve_field(field)
    stocks.sort(key=cmp_to_key(lambda a, b: _compare(getattr(a, attr), getattr(b, attr))))
    return stocks
