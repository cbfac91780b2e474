"""Monthly investment records: grouped table, previous-month lookup, save and roll-forward."""

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from carteira.logger import async_log_timing, get_logger, log_timing
from carteira.models import MONETARY_FIELDS, Asset, Bank, Client, Investment
from carteira.schemas.investment import InvestmentFilters, InvestmentForm
from carteira.services.aggregation import InvestmentGroup, MonetaryTotals, grand_totals, group_totals
from carteira.services.investment_filters import build_filtered_predicate, latest_period
from carteira.services.pagination import count_pages, count_rows, page_offset
from carteira.utils.periods import next_period, period_end_date, previous_period

logger = get_logger(__name__)


class InvestmentServiceError(Exception):
    """Base exception for investment service errors."""


class InvestmentNotFoundError(InvestmentServiceError):
    """Investment not found error."""


class InvestmentReferenceError(InvestmentServiceError):
    """Client, bank or asset referenced by the form does not exist."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NothingToRollForwardError(InvestmentServiceError):
    """No records match the filters for the source period."""


@dataclass
class InvestmentTable:
    """One page of (client, year, month) groups with their records and totals."""

    groups: list[InvestmentGroup]
    records: list[Investment]
    totals: MonetaryTotals
    page: int
    total_groups: int
    total_pages: int


@dataclass(frozen=True)
class PreviousBalance:
    year: str
    month: str
    found: bool = False
    gross_balance: int = 0
    net_balance: int = 0


@dataclass
class RollForwardResult:
    source: tuple[str, str]
    target: tuple[str, str]
    created: list[Investment] = field(default_factory=list)
    skipped: int = 0


def compute_auto_yield(
    *,
    gross_balance: int,
    previous_balance: int,
    amount_redeemed: int,
    incurred_tax: int,
    amount_applied: int,
) -> int:
    """Yield implied by the balance change, net of cash moved in or out."""
    return gross_balance - previous_balance + amount_redeemed + incurred_tax - amount_applied


def _with_relations(stmt):
    return stmt.options(
        selectinload(Investment.client),
        selectinload(Investment.bank),
        selectinload(Investment.asset).selectinload(Asset.asset_type),
    )


async def list_investment_table(
    db: AsyncSession,
    filters: InvestmentFilters,
    page: int,
    page_size: int,
) -> InvestmentTable:
    """
    Page through investments by (client, year, month) group.

    Groups are keyed by client id, so clients sharing a name stay apart. They
    are ordered by client name, then newest period first; records inside a
    group by bank and asset name. Totals cover the records on the page.
    """
    async with async_log_timing("investment_table", logger=logger, level="debug", page=page):
        predicate = await build_filtered_predicate(db, filters)

        groups_stmt = predicate.apply(
            select(Investment.client_id, Client.name, Investment.year, Investment.month).join(
                Client, Investment.client_id == Client.id
            )
        ).group_by(Investment.client_id, Client.name, Investment.year, Investment.month)

        total_groups = await count_rows(db, groups_stmt)
        page_keys_stmt = (
            groups_stmt.order_by(Client.name, Investment.year.desc(), Investment.month.desc(), Investment.client_id)
            .limit(page_size)
            .offset(page_offset(page, page_size))
        )
        keys = [(row.client_id, row.year, row.month) for row in await db.execute(page_keys_stmt)]

        records: list[Investment] = []
        if keys:
            rows_stmt = (
                predicate.apply(select(Investment))
                .join(Client, Investment.client_id == Client.id)
                .join(Bank, Investment.bank_id == Bank.id)
                .join(Asset, Investment.asset_id == Asset.id)
                .where(tuple_(Investment.client_id, Investment.year, Investment.month).in_(keys))
                .options(
                    contains_eager(Investment.client),
                    contains_eager(Investment.bank),
                    contains_eager(Investment.asset).selectinload(Asset.asset_type),
                )
                .order_by(
                    Client.name,
                    Investment.year.desc(),
                    Investment.month.desc(),
                    Investment.client_id,
                    Bank.name,
                    Asset.name,
                    Investment.id,
                )
            )
            records = list((await db.execute(rows_stmt)).scalars().unique().all())

    with log_timing("group_totals", logger=logger, level="debug", records=len(records)):
        groups = group_totals(records)
        totals = grand_totals(records)

    return InvestmentTable(
        groups=groups,
        records=records,
        totals=totals,
        page=page,
        total_groups=total_groups,
        total_pages=count_pages(total_groups, page_size, minimum=1),
    )


async def get_investment(db: AsyncSession, investment_id: UUID) -> Investment:
    result = await db.execute(_with_relations(select(Investment).where(Investment.id == investment_id)))
    investment = result.scalar_one_or_none()
    if not investment:
        raise InvestmentNotFoundError(f"Investment {investment_id} not found")
    return investment


async def get_previous_balance(
    db: AsyncSession,
    client_id: UUID,
    bank_id: UUID,
    asset_id: UUID,
    year: str | int,
    month: str | int,
) -> PreviousBalance:
    """Balances of the same client/bank/asset in the month before ``year``/``month``."""
    prev_year, prev_month = previous_period(year, month)
    result = await db.execute(
        select(Investment.gross_balance, Investment.net_balance)
        .where(
            Investment.client_id == client_id,
            Investment.bank_id == bank_id,
            Investment.asset_id == asset_id,
            Investment.year == prev_year,
            Investment.month == prev_month,
        )
        .order_by(Investment.created_at.desc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return PreviousBalance(year=prev_year, month=prev_month)
    return PreviousBalance(
        year=prev_year,
        month=prev_month,
        found=True,
        gross_balance=row.gross_balance,
        net_balance=row.net_balance,
    )


async def _load_asset(db: AsyncSession, data: InvestmentForm) -> Asset:
    if await db.get(Client, data.client_id) is None:
        raise InvestmentReferenceError("client_id", "Client not found")
    if await db.get(Bank, data.bank_id) is None:
        raise InvestmentReferenceError("bank_id", "Bank not found")
    asset = await db.get(Asset, data.asset_id)
    if asset is None:
        raise InvestmentReferenceError("asset_id", "Asset not found")
    return asset


async def _resolve_values(db: AsyncSession, data: InvestmentForm, asset: Asset) -> dict:
    values = data.model_dump(include=set(MONETARY_FIELDS))

    if data.previous_balance is None:
        previous = await get_previous_balance(
            db, data.client_id, data.bank_id, data.asset_id, data.year_str, data.month_str
        )
        values["previous_balance"] = previous.gross_balance

    if asset.auto_yield:
        values["monthly_yield"] = compute_auto_yield(
            gross_balance=values["gross_balance"],
            previous_balance=values["previous_balance"],
            amount_redeemed=values["amount_redeemed"],
            incurred_tax=values["incurred_tax"],
            amount_applied=values["amount_applied"],
        )

    values.update(
        year=data.year_str,
        month=data.month_str,
        date=period_end_date(data.year, data.month),
        client_id=data.client_id,
        bank_id=data.bank_id,
        asset_id=data.asset_id,
    )
    return values


async def create_investment(db: AsyncSession, data: InvestmentForm) -> Investment:
    asset = await _load_asset(db, data)
    investment = Investment(**await _resolve_values(db, data, asset))
    db.add(investment)
    await db.flush()
    return await get_investment(db, investment.id)


async def update_investment(db: AsyncSession, investment_id: UUID, data: InvestmentForm) -> Investment:
    investment = await get_investment(db, investment_id)
    asset = await _load_asset(db, data)
    for name, value in (await _resolve_values(db, data, asset)).items():
        setattr(investment, name, value)
    await db.flush()
    db.expire(investment, ["client", "bank", "asset"])
    return await get_investment(db, investment_id)


async def delete_investment(db: AsyncSession, investment_id: UUID) -> None:
    investment = await get_investment(db, investment_id)
    await db.delete(investment)
    await db.flush()


async def roll_forward(db: AsyncSession, filters: InvestmentFilters) -> RollForwardResult:
    """
    Copy the records of one period into the following month.

    The source period is the filtered year/month when both are given,
    otherwise the latest period among the matching records. Each copy starts
    with previous_balance = the source gross balance and every other amount
    zeroed. Positions already present in the target month are skipped.
    """
    predicate = await build_filtered_predicate(db, filters)

    if filters.year and filters.month:
        source = (filters.year, filters.month)
    else:
        source = await latest_period(db, predicate)
        if source is None:
            raise NothingToRollForwardError("No investments found to copy")

    target = next_period(*source)
    source_rows = (await db.execute(predicate.for_period(*source).apply(select(Investment)))).scalars().all()
    if not source_rows:
        raise NothingToRollForwardError("No investments found to copy with the applied filters")

    existing = await db.execute(
        select(Investment.client_id, Investment.bank_id, Investment.asset_id).where(
            Investment.year == target[0], Investment.month == target[1]
        )
    )
    taken = {tuple(row) for row in existing}

    result = RollForwardResult(source=source, target=target)
    target_date = period_end_date(*target)
    for row in source_rows:
        position = (row.client_id, row.bank_id, row.asset_id)
        if position in taken:
            result.skipped += 1
            continue
        taken.add(position)
        copy = Investment(
            date=target_date,
            year=target[0],
            month=target[1],
            client_id=row.client_id,
            bank_id=row.bank_id,
            asset_id=row.asset_id,
            **{name: 0 for name in MONETARY_FIELDS},
        )
        copy.previous_balance = row.gross_balance
        db.add(copy)
        result.created.append(copy)

    await db.flush()
    logger.info(
        "Investments rolled forward",
        source=f"{source[0]}-{source[1]}",
        target=f"{target[0]}-{target[1]}",
        created=len(result.created),
        skipped=result.skipped,
    )
    return result
