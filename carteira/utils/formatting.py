"""Locale-aware display helpers for money, dates and percentages.

Monetary amounts are stored as integer cents; everything here converts at the
display boundary only. Locale and currency default to the configured
``DISPLAY_LOCALE`` / ``DISPLAY_CURRENCY``.
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from babel.dates import format_date
from babel.numbers import NumberFormatError, format_decimal, parse_decimal
from babel.numbers import format_currency as babel_format_currency

from carteira.config import settings

ELLIPSIS = "..."
DEFAULT_DECIMALS = 4
CENTS = Decimal("100")

_CURRENCY_NOISE = re.compile(r"[^\d,.\-]")
_CURRENCY_SYMBOL = re.compile(r"[^\d,.\-\s]")
_GROUPED_THOUSANDS = re.compile(r"\.\d{3}(?!\d)")


def _to_decimal(value: object) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def format_currency(cents: int | Decimal | None, *, locale: str | None = None, currency: str | None = None) -> str:
    """Render an amount in cents as a currency string, e.g. ``R$ 1.234,56``."""
    amount = _to_decimal(cents)
    if amount is None:
        amount = Decimal("0")
    return babel_format_currency(
        amount / CENTS,
        currency or settings.currency,
        locale=locale or settings.locale,
    )


def parse_currency(text: str | None, *, locale: str | None = None) -> int | None:
    """Parse user-entered money into integer cents.

    Text carrying a currency symbol, a comma or a dot followed by exactly three
    digits is read strictly with the locale's separators, so ``R$ 1.234`` is
    one thousand two hundred and thirty-four and misplaced grouping such as
    ``1,234.56`` is rejected. Bare numbers like ``1234.56`` use a dot decimal.
    Returns ``None`` when nothing parses.
    """
    if text is None:
        return None
    text = str(text)
    cleaned = _CURRENCY_NOISE.sub("", text)
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        return None

    localized = bool(_CURRENCY_SYMBOL.search(text)) or "," in cleaned or bool(_GROUPED_THOUSANDS.search(cleaned))
    try:
        if localized:
            amount = parse_decimal(cleaned, locale=locale or settings.locale, strict=True)
        else:
            amount = Decimal(cleaned)
    except (NumberFormatError, InvalidOperation, ValueError):
        return None

    return int((amount * CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def format_date_local(value: date | datetime | str, *, locale: str | None = None) -> str:
    return format_date(_as_date(value), format="medium", locale=locale or settings.locale)


def year_of(value: date | datetime | str) -> str:
    return f"{_as_date(value).year:04d}"


def month_of(value: date | datetime | str) -> str:
    return f"{_as_date(value).month:02d}"


def format_decimals(value: object, decimals: object, *, locale: str | None = None) -> str:
    """Format a number with a fixed count of fraction digits.

    Non-numeric values render as zero; a negative or non-integer ``decimals``
    falls back to four places.
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        decimals = DEFAULT_DECIMALS

    number = _to_decimal(value)
    if number is None:
        number = Decimal("0")

    pattern = "#,##0." + "0" * decimals if decimals else "#,##0"
    return format_decimal(number, format=pattern, locale=locale or settings.locale)


def generate_pagination(current_page: int, total_pages: int) -> list[int | str]:
    """Page links to render, collapsing long ranges with ``"..."``."""
    if total_pages <= 7:
        return list(range(1, total_pages + 1))

    if current_page <= 3:
        return [1, 2, 3, ELLIPSIS, total_pages - 1, total_pages]

    if current_page >= total_pages - 2:
        return [1, 2, ELLIPSIS, total_pages - 2, total_pages - 1, total_pages]

    return [
        1,
        ELLIPSIS,
        current_page - 1,
        current_page,
        current_page + 1,
        ELLIPSIS,
        total_pages,
    ]
