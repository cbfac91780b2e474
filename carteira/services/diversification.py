"""Diversification analytics - gross balance distribution by category and bank."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carteira.logger import get_logger
from carteira.models import Asset, Bank, Investment
from carteira.schemas.investment import InvestmentFilters
from carteira.services.investment_filters import (
    InvestmentPredicate,
    build_filtered_predicate,
    latest_period,
)

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"
UNKNOWN_BANK = "Unknown bank"


class SnapshotPolicy(str, Enum):
    """Which months a distribution covers when no month filter is given.

    ``LATEST`` re-scopes to the most recent (year, month) in the filtered set
    so balances of different months are never added together.
    """

    LATEST = "latest"
    ALL = "all"


@dataclass(frozen=True)
class DistributionSlice:
    label: str
    value: int
    percentage: Decimal


def build_distribution(pairs: Iterable[tuple[str, int]]) -> list[DistributionSlice]:
    """Sum values per label, drop non-positive sums, sort by value descending."""
    sums: dict[str, int] = defaultdict(int)
    for label, value in pairs:
        sums[label] += int(value or 0)

    kept = {label: value for label, value in sums.items() if value > 0}
    total = sum(kept.values())

    slices = [
        DistributionSlice(
            label=label,
            value=value,
            percentage=(Decimal(value) / Decimal(total) * Decimal("100")) if total > 0 else Decimal("0"),
        )
        for label, value in kept.items()
    ]
    slices.sort(key=lambda s: (-s.value, s.label))
    return slices


def primary_category_name(asset: Asset | None) -> str:
    """Name of the asset's first associated category."""
    if asset is None or not asset.categories:
        return UNCATEGORIZED
    return asset.categories[0].name


async def scope_predicate(
    db: AsyncSession,
    filters: InvestmentFilters,
    snapshot: SnapshotPolicy = SnapshotPolicy.LATEST,
) -> InvestmentPredicate | None:
    """Filtered predicate, re-scoped to the latest period when the policy asks.

    Returns None when the latest-snapshot policy applies and nothing matches.
    """
    predicate = await build_filtered_predicate(db, filters)
    if snapshot is SnapshotPolicy.ALL or filters.month:
        return predicate

    period = await latest_period(db, predicate)
    if period is None:
        return None
    return predicate.for_period(*period)


async def get_category_distribution(
    db: AsyncSession,
    filters: InvestmentFilters,
    snapshot: SnapshotPolicy = SnapshotPolicy.LATEST,
) -> list[DistributionSlice]:
    """
    Gross balance by category.

    Each asset's balance is attributed wholly to its first associated
    category; assets without categories fall under ``Uncategorized``.
    """
    predicate = await scope_predicate(db, filters, snapshot)
    if predicate is None:
        return []

    stmt = predicate.apply(
        select(Investment.asset_id, func.sum(Investment.gross_balance).label("gross_balance"))
    ).group_by(Investment.asset_id)
    per_asset: dict[UUID, int] = {row.asset_id: int(row.gross_balance or 0) for row in await db.execute(stmt)}
    if not per_asset:
        return []

    assets_result = await db.execute(
        select(Asset).where(Asset.id.in_(list(per_asset))).options(selectinload(Asset.categories))
    )
    assets = {asset.id: asset for asset in assets_result.scalars().all()}

    slices = build_distribution(
        (primary_category_name(assets.get(asset_id)), value) for asset_id, value in per_asset.items()
    )
    logger.debug("Category distribution computed", assets=len(per_asset), slices=len(slices), snapshot=snapshot.value)
    return slices


async def get_bank_distribution(
    db: AsyncSession,
    filters: InvestmentFilters,
    snapshot: SnapshotPolicy = SnapshotPolicy.LATEST,
) -> list[DistributionSlice]:
    """Gross balance by bank."""
    predicate = await scope_predicate(db, filters, snapshot)
    if predicate is None:
        return []

    stmt = (
        predicate.apply(
            select(Bank.name, func.sum(Investment.gross_balance).label("gross_balance")).select_from(Investment)
        )
        .outerjoin(Bank, Investment.bank_id == Bank.id)
        .group_by(Bank.name)
    )
    rows = await db.execute(stmt)
    return build_distribution((row.name or UNKNOWN_BANK, int(row.gross_balance or 0)) for row in rows)
