"""Pydantic schemas for monthly investment records and their table view."""

import datetime as dt
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from carteira.schemas.base import BaseResponse
from carteira.schemas.forms import Cents, OptionalCents
from carteira.utils.formatting import month_of, year_of
from carteira.utils.periods import normalize_month

MIN_YEAR = 2000


class InvestmentFilters(BaseModel):
    """Optional filters shared by the investment table and analytics.

    Text filters are case-insensitive "contains" matches; ``year`` and
    ``month`` are exact; ``category_id`` also matches sub-categories.
    """

    client: str | None = None
    year: str | None = None
    month: str | None = None
    bank: str | None = None
    asset: str | None = None
    asset_type: str | None = None
    category_id: UUID | None = None

    @field_validator("client", "year", "bank", "asset", "asset_type", "category_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("month", mode="before")
    @classmethod
    def pad_month(cls, value: Any) -> Any:
        if value is None:
            return None
        value = str(value).strip()
        if not value:
            return None
        if value.isdigit():
            return normalize_month(value)
        return value


class InvestmentForm(BaseModel):
    """Create/update payload for a monthly record.

    Money fields accept display strings such as ``R$ 1.234,56`` and are
    stored as cents. ``previous_balance`` left blank defaults to the gross
    balance of the same position in the previous month.
    """

    year: int = Field(ge=MIN_YEAR)
    month: int = Field(ge=1, le=12)
    client_id: UUID
    bank_id: UUID
    asset_id: UUID

    previous_balance: OptionalCents = None
    monthly_yield: Cents = 0
    monthly_dividends: Cents = 0
    amount_applied: Cents = 0
    amount_redeemed: Cents = 0
    incurred_tax: Cents = 0
    projected_tax: Cents = 0
    gross_balance: Cents = 0
    net_balance: Cents = 0

    @model_validator(mode="before")
    @classmethod
    def period_from_date(cls, data: Any) -> Any:
        # A date input may stand in for the year/month pair
        if not isinstance(data, dict) or not data.get("date"):
            return data
        data = dict(data)
        try:
            if not str(data.get("year") or "").strip():
                data["year"] = year_of(data["date"])
            if not str(data.get("month") or "").strip():
                data["month"] = month_of(data["date"])
        except ValueError as e:
            raise ValueError("Invalid date") from e
        return data

    @field_validator("year")
    @classmethod
    def not_in_future(cls, value: int) -> int:
        current = dt.date.today().year
        if value > current:
            raise ValueError(f"Year must be between {MIN_YEAR} and {current}")
        return value

    @property
    def year_str(self) -> str:
        return f"{self.year:04d}"

    @property
    def month_str(self) -> str:
        return normalize_month(self.month)


class PercentageMetricsResponse(BaseModel):
    growth: Decimal | None = None
    yield_pct: Decimal | None = None
    dividends_pct: Decimal | None = None
    yield_plus_dividends_pct: Decimal | None = None


class MonetaryTotalsResponse(BaseModel):
    previous_balance: int = 0
    monthly_yield: int = 0
    monthly_dividends: int = 0
    amount_applied: int = 0
    amount_redeemed: int = 0
    incurred_tax: int = 0
    projected_tax: int = 0
    gross_balance: int = 0
    net_balance: int = 0


class InvestmentResponse(BaseResponse):
    id: UUID
    date: dt.date
    year: str
    month: str
    client_id: UUID
    client_name: str | None = None
    bank_id: UUID
    bank_name: str | None = None
    asset_id: UUID
    asset_name: str | None = None
    asset_type_name: str | None = None

    previous_balance: int
    monthly_yield: int
    monthly_dividends: int
    amount_applied: int
    amount_redeemed: int
    incurred_tax: int
    projected_tax: int
    gross_balance: int
    net_balance: int

    metrics: PercentageMetricsResponse | None = None


class InvestmentGroupResponse(BaseModel):
    client: str
    year: str
    month: str
    items: list[InvestmentResponse]
    totals: MonetaryTotalsResponse
    metrics: PercentageMetricsResponse


class InvestmentTableResponse(BaseModel):
    groups: list[InvestmentGroupResponse]
    totals: MonetaryTotalsResponse
    metrics: PercentageMetricsResponse
    page: int
    total_pages: int
    total_groups: int
    pagination: list[int | str]


class PreviousBalanceResponse(BaseModel):
    found: bool
    year: str
    month: str
    gross_balance: int = 0
    net_balance: int = 0


class RollForwardResponse(BaseModel):
    source_year: str
    source_month: str
    target_year: str
    target_month: str
    created: int
    skipped: int
