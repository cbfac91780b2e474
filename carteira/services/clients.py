"""Client management service."""

from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from carteira.logger import get_logger
from carteira.models import Client, Investment, Invoice
from carteira.schemas.client import ClientForm
from carteira.services.investment_filters import contains
from carteira.services.pagination import paginate

logger = get_logger(__name__)


class ClientServiceError(Exception):
    """Base exception for client service errors."""


class ClientNotFoundError(ClientServiceError):
    """Client not found error."""


async def list_clients(
    db: AsyncSession,
    query: str | None,
    page: int,
    page_size: int,
) -> tuple[list[Client], int]:
    stmt = select(Client)
    if query:
        stmt = stmt.where(or_(contains(Client.name, query), contains(Client.email, query)))
    return await paginate(db, stmt.order_by(Client.name, Client.id), page, page_size)


async def list_all_clients(db: AsyncSession) -> list[Client]:
    result = await db.execute(select(Client).order_by(Client.name))
    return list(result.scalars().all())


async def get_client(db: AsyncSession, client_id: UUID) -> Client:
    client = await db.get(Client, client_id)
    if not client:
        raise ClientNotFoundError(f"Client {client_id} not found")
    return client


async def create_client(db: AsyncSession, data: ClientForm) -> Client:
    client = Client(name=data.name, email=str(data.email))
    db.add(client)
    await db.flush()
    await db.refresh(client)
    return client


async def update_client(db: AsyncSession, client_id: UUID, data: ClientForm) -> Client:
    client = await get_client(db, client_id)
    client.name = data.name
    client.email = str(data.email)
    await db.flush()
    await db.refresh(client)
    return client


async def delete_client(db: AsyncSession, client_id: UUID) -> None:
    """Delete a client together with its invoices and investment records.

    Runs in the caller's transaction; nothing is committed here.
    """
    client = await get_client(db, client_id)

    invoices = await db.execute(delete(Invoice).where(Invoice.client_id == client_id))
    investments = await db.execute(delete(Investment).where(Investment.client_id == client_id))
    await db.delete(client)
    await db.flush()

    logger.info(
        "Client deleted",
        client_id=str(client_id),
        invoices=invoices.rowcount,
        investments=investments.rowcount,
    )
