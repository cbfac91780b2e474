"""Year/month period arithmetic for monthly investment records."""

import calendar
from datetime import date


def normalize_month(month: str | int) -> str:
    return f"{int(month):02d}"


def period_end_date(year: str | int, month: str | int) -> date:
    """Last calendar day of the given month."""
    y, m = int(year), int(month)
    return date(y, m, calendar.monthrange(y, m)[1])


def previous_period(year: str | int, month: str | int) -> tuple[str, str]:
    y, m = int(year), int(month)
    if m == 1:
        return str(y - 1), "12"
    return str(y), normalize_month(m - 1)


def next_period(year: str | int, month: str | int) -> tuple[str, str]:
    y, m = int(year), int(month)
    if m == 12:
        return str(y + 1), "01"
    return str(y), normalize_month(m + 1)
