"""Portfolio analytics - summary metric cards and the monthly performance series."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carteira.logger import async_log_timing, get_logger
from carteira.models import Investment
from carteira.schemas.investment import InvestmentFilters
from carteira.services.investment_filters import build_filtered_predicate, latest_period

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregatedMetrics:
    """Totals over the filtered set; balances come from its latest period only."""

    total_applied: int = 0
    total_redeemed: int = 0
    total_yield: int = 0
    total_dividends: int = 0
    total_taxes: int = 0
    current_gross_balance: int = 0
    current_net_balance: int = 0
    latest_year: str | None = None
    latest_month: str | None = None
    record_count: int = 0


@dataclass(frozen=True)
class PerformancePoint:
    period: str
    year: str
    month: str
    gross_balance: int
    monthly_yield: int
    monthly_dividends: int
    amount_applied: int
    amount_redeemed: int


def _int(value) -> int:
    return int(value or 0)


async def get_aggregated_metrics(db: AsyncSession, filters: InvestmentFilters) -> AggregatedMetrics:
    async with async_log_timing("aggregated_metrics", logger=logger, level="debug"):
        predicate = await build_filtered_predicate(db, filters)

        totals_stmt = predicate.apply(
            select(
                func.sum(Investment.amount_applied).label("applied"),
                func.sum(Investment.amount_redeemed).label("redeemed"),
                func.sum(Investment.monthly_yield).label("yield_"),
                func.sum(Investment.monthly_dividends).label("dividends"),
                func.sum(Investment.incurred_tax + Investment.projected_tax).label("taxes"),
                func.count(Investment.id).label("count"),
            )
        )
        totals = (await db.execute(totals_stmt)).one()
        if not totals.count:
            return AggregatedMetrics()

        period = await latest_period(db, predicate)
        gross = net = 0
        if period is not None:
            balance_stmt = predicate.for_period(*period).apply(
                select(
                    func.sum(Investment.gross_balance).label("gross"),
                    func.sum(Investment.net_balance).label("net"),
                )
            )
            balances = (await db.execute(balance_stmt)).one()
            gross, net = _int(balances.gross), _int(balances.net)

    return AggregatedMetrics(
        total_applied=_int(totals.applied),
        total_redeemed=_int(totals.redeemed),
        total_yield=_int(totals.yield_),
        total_dividends=_int(totals.dividends),
        total_taxes=_int(totals.taxes),
        current_gross_balance=gross,
        current_net_balance=net,
        latest_year=period[0] if period else None,
        latest_month=period[1] if period else None,
        record_count=int(totals.count),
    )


async def get_performance_series(db: AsyncSession, filters: InvestmentFilters) -> list[PerformancePoint]:
    """Per-month sums, oldest month first."""
    predicate = await build_filtered_predicate(db, filters)
    stmt = (
        predicate.apply(
            select(
                Investment.year,
                Investment.month,
                func.sum(Investment.gross_balance).label("gross_balance"),
                func.sum(Investment.monthly_yield).label("monthly_yield"),
                func.sum(Investment.monthly_dividends).label("monthly_dividends"),
                func.sum(Investment.amount_applied).label("amount_applied"),
                func.sum(Investment.amount_redeemed).label("amount_redeemed"),
            )
        )
        .group_by(Investment.year, Investment.month)
        .order_by(Investment.year, Investment.month)
    )
    rows = await db.execute(stmt)
    return [
        PerformancePoint(
            period=f"{row.year}-{row.month}",
            year=row.year,
            month=row.month,
            gross_balance=_int(row.gross_balance),
            monthly_yield=_int(row.monthly_yield),
            monthly_dividends=_int(row.monthly_dividends),
            amount_applied=_int(row.amount_applied),
            amount_redeemed=_int(row.amount_redeemed),
        )
        for row in rows
    ]
