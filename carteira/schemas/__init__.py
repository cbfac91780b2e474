"""Pydantic schemas package."""

from carteira.schemas.analytics import (
    AggregatedMetricsResponse,
    DashboardCardsResponse,
    DistributionResponse,
    DistributionSliceResponse,
    LatestInvoicesResponse,
    PerformancePointResponse,
)
from carteira.schemas.base import BaseResponse, PageResponse
from carteira.schemas.catalog import (
    AssetForm,
    AssetResponse,
    AssetTypeForm,
    AssetTypeResponse,
    BankForm,
    BankResponse,
    CategoryDescendantsResponse,
    CategoryForm,
    CategoryRef,
    CategoryResponse,
)
from carteira.schemas.client import ClientForm, ClientResponse, InvoiceForm, InvoiceResponse
from carteira.schemas.forms import FormState
from carteira.schemas.investment import (
    InvestmentFilters,
    InvestmentForm,
    InvestmentGroupResponse,
    InvestmentResponse,
    InvestmentTableResponse,
    MonetaryTotalsResponse,
    PercentageMetricsResponse,
    PreviousBalanceResponse,
    RollForwardResponse,
)

__all__ = [
    "AggregatedMetricsResponse",
    "AssetForm",
    "AssetResponse",
    "AssetTypeForm",
    "AssetTypeResponse",
    "BankForm",
    "BankResponse",
    "BaseResponse",
    "CategoryDescendantsResponse",
    "CategoryForm",
    "CategoryRef",
    "CategoryResponse",
    "ClientForm",
    "ClientResponse",
    "DashboardCardsResponse",
    "DistributionResponse",
    "DistributionSliceResponse",
    "FormState",
    "InvestmentFilters",
    "InvestmentForm",
    "InvestmentGroupResponse",
    "InvestmentResponse",
    "InvestmentTableResponse",
    "InvoiceForm",
    "InvoiceResponse",
    "LatestInvoicesResponse",
    "MonetaryTotalsResponse",
    "PageResponse",
    "PercentageMetricsResponse",
    "PerformancePointResponse",
    "PreviousBalanceResponse",
    "RollForwardResponse",
]
