"""Shared utility functions."""

from .cpf import normalize_cpf, validate_cpf
from .dates import is_same_calendar_day, now_timestamp, parse_timestamp

__all__ = [
    "is_same_calendar_day",
    "normalize_cpf",
    "now_timestamp",
    "parse_timestamp",
    "validate_cpf",
]
