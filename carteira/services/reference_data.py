"""Banks and asset types: flat reference lists identified by a unique name."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carteira.models import AssetType, Bank
from carteira.services.investment_filters import contains
from carteira.services.pagination import paginate

NamedModel = type[Bank] | type[AssetType]


class ReferenceDataError(Exception):
    """Base exception for bank/asset type errors."""


class ReferenceNotFoundError(ReferenceDataError):
    """Bank or asset type not found."""


class DuplicateNameError(ReferenceDataError):
    """Another row already uses this name."""


async def list_named(
    db: AsyncSession,
    model: NamedModel,
    query: str | None,
    page: int,
    page_size: int,
) -> tuple[list, int]:
    stmt = select(model)
    if query:
        stmt = stmt.where(contains(model.name, query))
    return await paginate(db, stmt.order_by(model.name), page, page_size)


async def get_named(db: AsyncSession, model: NamedModel, entity_id: UUID):
    entity = await db.get(model, entity_id)
    if entity is None:
        raise ReferenceNotFoundError(f"{model.__name__} {entity_id} not found")
    return entity


async def _ensure_unique(db: AsyncSession, model: NamedModel, name: str, exclude_id: UUID | None = None) -> None:
    stmt = select(model.id).where(model.name == name)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None:
        raise DuplicateNameError(f"{model.__name__} '{name}' already exists")


async def create_named(db: AsyncSession, model: NamedModel, name: str):
    await _ensure_unique(db, model, name)
    entity = model(name=name)
    db.add(entity)
    await db.flush()
    await db.refresh(entity)
    return entity


async def update_named(db: AsyncSession, model: NamedModel, entity_id: UUID, name: str):
    entity = await get_named(db, model, entity_id)
    await _ensure_unique(db, model, name, exclude_id=entity_id)
    entity.name = name
    await db.flush()
    await db.refresh(entity)
    return entity


async def delete_named(db: AsyncSession, model: NamedModel, entity_id: UUID) -> None:
    entity = await get_named(db, model, entity_id)
    await db.delete(entity)
    await db.flush()
