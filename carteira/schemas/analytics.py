"""Pydantic schemas for portfolio analytics and the dashboard."""

from decimal import Decimal

from pydantic import BaseModel

from carteira.schemas.base import BaseResponse
from carteira.schemas.client import InvoiceResponse


class AggregatedMetricsResponse(BaseResponse):
    total_applied: int
    total_redeemed: int
    total_yield: int
    total_dividends: int
    total_taxes: int
    current_gross_balance: int
    current_net_balance: int
    latest_year: str | None = None
    latest_month: str | None = None
    record_count: int


class PerformancePointResponse(BaseResponse):
    period: str
    year: str
    month: str
    gross_balance: int
    monthly_yield: int
    monthly_dividends: int
    amount_applied: int
    amount_redeemed: int


class DistributionSliceResponse(BaseResponse):
    label: str
    value: int
    percentage: Decimal
    percentage_display: str | None = None


class DistributionResponse(BaseModel):
    snapshot: str
    items: list[DistributionSliceResponse]


class DashboardCardsResponse(BaseResponse):
    number_of_invoices: int
    number_of_clients: int
    total_paid: int
    total_pending: int
    total_paid_display: str
    total_pending_display: str


class LatestInvoicesResponse(BaseModel):
    items: list[InvoiceResponse]
