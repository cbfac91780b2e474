"""Asset management service."""

from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carteira.logger import get_logger
from carteira.models import Asset, AssetCategory, AssetType, Category
from carteira.schemas.catalog import AssetForm
from carteira.services.category_tree import resolve_category_ids
from carteira.services.investment_filters import contains
from carteira.services.pagination import paginate

logger = get_logger(__name__)


class AssetServiceError(Exception):
    """Base exception for asset service errors."""


class AssetNotFoundError(AssetServiceError):
    """Asset not found error."""


class AssetReferenceError(AssetServiceError):
    """Asset type or category referenced by the form does not exist."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


def _with_relations(stmt):
    return stmt.options(selectinload(Asset.asset_type), selectinload(Asset.categories))


async def list_assets(
    db: AsyncSession,
    query: str | None,
    page: int,
    page_size: int,
    category_id: UUID | None = None,
) -> tuple[list[Asset], int]:
    stmt = select(Asset).outerjoin(AssetType, Asset.asset_type_id == AssetType.id)
    if query:
        stmt = stmt.where(or_(contains(Asset.name, query), contains(AssetType.name, query)))
    if category_id:
        category_ids = await resolve_category_ids(db, category_id)
        stmt = stmt.where(Asset.category_links.any(AssetCategory.category_id.in_(category_ids)))
    stmt = _with_relations(stmt.order_by(Asset.name, Asset.id))
    return await paginate(db, stmt, page, page_size)


async def get_asset(db: AsyncSession, asset_id: UUID) -> Asset:
    result = await db.execute(_with_relations(select(Asset).where(Asset.id == asset_id)))
    asset = result.scalar_one_or_none()
    if not asset:
        raise AssetNotFoundError(f"Asset {asset_id} not found")
    return asset


async def _check_references(db: AsyncSession, data: AssetForm) -> None:
    if data.asset_type_id is not None and await db.get(AssetType, data.asset_type_id) is None:
        raise AssetReferenceError("asset_type_id", "Asset type not found")
    if data.category_ids:
        result = await db.execute(select(Category.id).where(Category.id.in_(data.category_ids)))
        missing = set(data.category_ids) - set(result.scalars().all())
        if missing:
            raise AssetReferenceError("category_ids", "Category not found")


async def replace_categories(db: AsyncSession, asset_id: UUID, category_ids: list[UUID]) -> None:
    """Swap the asset's category associations, keeping submission order as position."""
    await db.execute(delete(AssetCategory).where(AssetCategory.asset_id == asset_id))
    db.add_all(
        AssetCategory(asset_id=asset_id, category_id=category_id, position=position)
        for position, category_id in enumerate(category_ids)
    )
    await db.flush()


async def create_asset(db: AsyncSession, data: AssetForm) -> Asset:
    await _check_references(db, data)
    asset = Asset(name=data.name, asset_type_id=data.asset_type_id, auto_yield=data.auto_yield)
    db.add(asset)
    await db.flush()
    await replace_categories(db, asset.id, data.category_ids)
    return await get_asset(db, asset.id)


async def update_asset(db: AsyncSession, asset_id: UUID, data: AssetForm) -> Asset:
    asset = await get_asset(db, asset_id)
    await _check_references(db, data)
    asset.name = data.name
    asset.asset_type_id = data.asset_type_id
    asset.auto_yield = data.auto_yield
    await db.flush()
    await replace_categories(db, asset_id, data.category_ids)
    db.expire(asset, ["asset_type", "categories", "category_links"])
    logger.debug("Asset categories replaced", asset_id=str(asset_id), categories=len(data.category_ids))
    return await get_asset(db, asset_id)


async def delete_asset(db: AsyncSession, asset_id: UUID) -> None:
    asset = await get_asset(db, asset_id)
    await db.delete(asset)
    await db.flush()
