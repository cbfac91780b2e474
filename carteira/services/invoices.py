"""Invoice management service."""

from datetime import date
from uuid import UUID

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carteira.models import Client, Invoice
from carteira.schemas.client import InvoiceForm
from carteira.services.investment_filters import contains
from carteira.services.pagination import paginate
from carteira.utils.formatting import parse_currency


class InvoiceServiceError(Exception):
    """Base exception for invoice service errors."""


class InvoiceNotFoundError(InvoiceServiceError):
    """Invoice not found error."""


class InvoiceClientNotFoundError(InvoiceServiceError):
    """Referenced client does not exist."""


def _search_clause(query: str):
    clauses = [
        contains(Client.name, query),
        contains(Client.email, query),
        contains(cast(Invoice.status, String), query),
    ]
    if any(ch.isdigit() for ch in query):
        amount = parse_currency(query)
        if amount is not None:
            clauses.append(Invoice.amount == amount)
    return or_(*clauses)


async def list_invoices(
    db: AsyncSession,
    query: str | None,
    page: int,
    page_size: int,
) -> tuple[list[Invoice], int]:
    stmt = select(Invoice).join(Client, Invoice.client_id == Client.id).options(selectinload(Invoice.client))
    if query:
        stmt = stmt.where(_search_clause(query))
    return await paginate(db, stmt.order_by(Invoice.date.desc(), Invoice.id), page, page_size)


async def get_invoice(db: AsyncSession, invoice_id: UUID) -> Invoice:
    result = await db.execute(
        select(Invoice).where(Invoice.id == invoice_id).options(selectinload(Invoice.client))
    )
    invoice = result.scalar_one_or_none()
    if not invoice:
        raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
    return invoice


async def _check_client(db: AsyncSession, client_id: UUID) -> None:
    if await db.get(Client, client_id) is None:
        raise InvoiceClientNotFoundError("Client not found")


async def create_invoice(db: AsyncSession, data: InvoiceForm) -> Invoice:
    await _check_client(db, data.client_id)
    invoice = Invoice(
        client_id=data.client_id,
        amount=data.amount,
        status=data.status,
        date=data.date or date.today(),
    )
    db.add(invoice)
    await db.flush()
    return await get_invoice(db, invoice.id)


async def update_invoice(db: AsyncSession, invoice_id: UUID, data: InvoiceForm) -> Invoice:
    invoice = await get_invoice(db, invoice_id)
    await _check_client(db, data.client_id)
    invoice.client_id = data.client_id
    invoice.amount = data.amount
    invoice.status = data.status
    if data.date is not None:
        invoice.date = data.date
    await db.flush()
    db.expire(invoice, ["client"])
    return await get_invoice(db, invoice_id)


async def delete_invoice(db: AsyncSession, invoice_id: UUID) -> None:
    invoice = await get_invoice(db, invoice_id)
    await db.delete(invoice)
    await db.flush()
