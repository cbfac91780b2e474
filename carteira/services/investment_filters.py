"""Filter predicate builder for investment queries.

Every table and analytics query over investments goes through
``build_filtered_predicate`` so that the same filter values always select the
same rows.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from carteira.models import Asset, AssetCategory, AssetType, Bank, Client, Investment
from carteira.schemas.investment import InvestmentFilters
from carteira.services.category_tree import resolve_category_ids


def contains(column, value: str) -> ColumnElement[bool]:
    """Case-insensitive substring match with LIKE wildcards escaped."""
    safe = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{safe}%", escape="\\")


@dataclass
class InvestmentPredicate:
    """Conjunction of boolean clauses over ``Investment``; empty matches all."""

    clauses: list[ColumnElement[bool]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.clauses)

    def apply(self, stmt: Select) -> Select:
        if not self.clauses:
            return stmt
        return stmt.where(*self.clauses)

    def narrowed(self, *extra: ColumnElement[bool]) -> "InvestmentPredicate":
        return InvestmentPredicate([*self.clauses, *extra])

    def for_period(self, year: str, month: str) -> "InvestmentPredicate":
        return self.narrowed(Investment.year == year, Investment.month == month)


def build_investment_predicate(
    filters: InvestmentFilters,
    category_ids: Sequence[UUID] = (),
) -> InvestmentPredicate:
    """Compose clauses for every filter that is present.

    ``category_ids`` is the already-resolved category set; an asset matches
    when it belongs to any of them.
    """
    clauses: list[ColumnElement[bool]] = []

    if filters.client:
        clauses.append(Investment.client.has(contains(Client.name, filters.client)))
    if filters.year:
        clauses.append(Investment.year == filters.year)
    if filters.month:
        clauses.append(Investment.month == filters.month)
    if filters.bank:
        clauses.append(Investment.bank.has(contains(Bank.name, filters.bank)))
    if filters.asset:
        clauses.append(Investment.asset.has(contains(Asset.name, filters.asset)))
    if filters.asset_type:
        clauses.append(Investment.asset.has(Asset.asset_type.has(contains(AssetType.name, filters.asset_type))))
    if category_ids:
        clauses.append(
            Investment.asset.has(Asset.category_links.any(AssetCategory.category_id.in_(list(category_ids))))
        )

    return InvestmentPredicate(clauses)


async def build_filtered_predicate(db: AsyncSession, filters: InvestmentFilters) -> InvestmentPredicate:
    category_ids = await resolve_category_ids(db, filters.category_id)
    return build_investment_predicate(filters, category_ids)


async def latest_period(db: AsyncSession, predicate: InvestmentPredicate) -> tuple[str, str] | None:
    """Most recent ``(year, month)`` present among the matching records."""
    stmt = predicate.apply(select(Investment.year, Investment.month))
    stmt = stmt.order_by(Investment.year.desc(), Investment.month.desc()).limit(1)
    row = (await db.execute(stmt)).first()
    if row is None:
        return None
    return row.year, row.month
