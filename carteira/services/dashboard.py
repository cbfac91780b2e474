"""Dashboard summary cards and latest invoices."""

from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carteira.models import Client, Invoice, InvoiceStatus
from carteira.utils.formatting import format_currency


@dataclass(frozen=True)
class DashboardCards:
    number_of_invoices: int
    number_of_clients: int
    total_paid: int
    total_pending: int

    @property
    def total_paid_display(self) -> str:
        return format_currency(self.total_paid)

    @property
    def total_pending_display(self) -> str:
        return format_currency(self.total_pending)


async def get_card_data(db: AsyncSession) -> DashboardCards:
    invoice_count = (await db.execute(select(func.count(Invoice.id)))).scalar() or 0
    client_count = (await db.execute(select(func.count(Client.id)))).scalar() or 0
    status_totals = (
        await db.execute(
            select(
                func.sum(case((Invoice.status == InvoiceStatus.PAID, Invoice.amount), else_=0)).label("paid"),
                func.sum(case((Invoice.status == InvoiceStatus.PENDING, Invoice.amount), else_=0)).label("pending"),
            )
        )
    ).one()

    return DashboardCards(
        number_of_invoices=invoice_count,
        number_of_clients=client_count,
        total_paid=int(status_totals.paid or 0),
        total_pending=int(status_totals.pending or 0),
    )


async def get_latest_invoices(db: AsyncSession, limit: int) -> list[Invoice]:
    result = await db.execute(
        select(Invoice)
        .options(selectinload(Invoice.client))
        .order_by(Invoice.date.desc(), Invoice.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
