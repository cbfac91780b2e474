"""Services package."""

from carteira.services.aggregation import (
    InvestmentGroup,
    MonetaryTotals,
    PercentageMetrics,
    compute_metrics,
    grand_totals,
    group_totals,
)
from carteira.services.category_tree import collect_descendant_ids, resolve_category_ids
from carteira.services.diversification import (
    DistributionSlice,
    SnapshotPolicy,
    build_distribution,
    get_bank_distribution,
    get_category_distribution,
)
from carteira.services.investment_filters import (
    InvestmentPredicate,
    build_filtered_predicate,
    build_investment_predicate,
)

__all__ = [
    "DistributionSlice",
    "InvestmentGroup",
    "InvestmentPredicate",
    "MonetaryTotals",
    "PercentageMetrics",
    "SnapshotPolicy",
    "build_distribution",
    "build_filtered_predicate",
    "build_investment_predicate",
    "collect_descendant_ids",
    "compute_metrics",
    "get_bank_distribution",
    "get_category_distribution",
    "grand_totals",
    "group_totals",
    "resolve_category_ids",
]
