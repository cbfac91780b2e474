"""Utility functions and helpers."""

from .exceptions import (
    raise_conflict,
    raise_internal_error,
    raise_not_found,
)
from .formatting import (
    format_currency,
    format_date_local,
    format_decimals,
    generate_pagination,
    month_of,
    parse_currency,
    year_of,
)
from .periods import next_period, normalize_month, period_end_date, previous_period

__all__ = [
    "format_currency",
    "format_date_local",
    "format_decimals",
    "generate_pagination",
    "month_of",
    "next_period",
    "normalize_month",
    "parse_currency",
    "period_end_date",
    "previous_period",
    "raise_conflict",
    "raise_internal_error",
    "raise_not_found",
    "year_of",
]
