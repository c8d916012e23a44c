"""Timestamp parsing and calendar-day helpers.

Stored timestamps come in two shapes: ISO-8601 strings written by this
package, and legacy JavaScript ``Date.toString()`` strings such as
``"Sat Oct 18 2026 14:03:00 GMT-0300 (Brasilia Standard Time)"``.
"""

import logging
import re
from datetime import datetime, tzinfo
from typing import Any, Optional, Union

import pytz

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"

_JS_DATE_PATTERN = re.compile(
    r"^[A-Za-z]{3} ([A-Za-z]{3} \d{1,2} \d{4} \d{2}:\d{2}:\d{2}) GMT([+-]\d{4})"
)

TimezoneLike = Union[str, tzinfo, None]


def get_timezone(tz: TimezoneLike = None) -> tzinfo:
    """Resolve a timezone name (or None for the default) to a tzinfo."""
    if tz is None:
        return pytz.timezone(DEFAULT_TIMEZONE)
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def _localize(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is not None:
        return value
    if hasattr(tz, "localize"):
        return tz.localize(value)
    return value.replace(tzinfo=tz)


def parse_timestamp(value: Any, tz: TimezoneLike = None) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware datetime.

    Naive values are interpreted in ``tz`` (default America/Sao_Paulo).

    Args:
        value: datetime or string timestamp
        tz: Timezone for naive values

    Returns:
        Aware datetime, or None if the value is not a recognizable date
    """
    if value is None or isinstance(value, bool):
        return None

    zone = get_timezone(tz)

    if isinstance(value, datetime):
        return _localize(value, zone)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return _localize(datetime.fromisoformat(iso_text), zone)
    except ValueError:
        pass

    match = _JS_DATE_PATTERN.match(text)
    if match:
        try:
            return datetime.strptime(
                f"{match.group(1)} {match.group(2)}", "%b %d %Y %H:%M:%S %z"
            )
        except ValueError:
            logger.debug(f"Unparseable legacy timestamp: {text!r}")

    return None


def is_same_calendar_day(a: Any, b: Any, tz: TimezoneLike = None) -> bool:
    """
    Compare two timestamps by calendar day in the given timezone.

    Time of day is ignored. Unparseable values never match.
    """
    zone = get_timezone(tz)
    first = parse_timestamp(a, zone)
    second = parse_timestamp(b, zone)
    if first is None or second is None:
        return False
    return first.astimezone(zone).date() == second.astimezone(zone).date()


def now_timestamp(tz: TimezoneLike = None) -> str:
    """Current time as an ISO-8601 string with UTC offset."""
    zone = get_timezone(tz)
    return datetime.now(pytz.utc).astimezone(zone).isoformat(timespec="seconds")
