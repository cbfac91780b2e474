"""Category management service."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carteira.models import Category
from carteira.schemas.catalog import CategoryForm
from carteira.services.category_tree import collect_descendant_ids, load_children_map
from carteira.services.investment_filters import contains
from carteira.services.pagination import paginate


class CategoryServiceError(Exception):
    """Base exception for category service errors."""


class CategoryNotFoundError(CategoryServiceError):
    """Category not found error."""


class InvalidParentError(CategoryServiceError):
    """Requested parent would not form a tree."""


async def list_categories(
    db: AsyncSession,
    query: str | None,
    page: int,
    page_size: int,
) -> tuple[list[Category], int]:
    stmt = select(Category).options(selectinload(Category.parent))
    if query:
        stmt = stmt.where(contains(Category.name, query))
    stmt = stmt.order_by(func.lower(Category.name), Category.id)
    return await paginate(db, stmt, page, page_size)


async def get_category(db: AsyncSession, category_id: UUID) -> Category:
    result = await db.execute(
        select(Category).where(Category.id == category_id).options(selectinload(Category.parent))
    )
    category = result.scalar_one_or_none()
    if not category:
        raise CategoryNotFoundError(f"Category {category_id} not found")
    return category


async def _check_parent(db: AsyncSession, parent_id: UUID | None, category_id: UUID | None = None) -> None:
    if parent_id is None:
        return
    if category_id is not None and parent_id == category_id:
        raise InvalidParentError("A category cannot be its own parent")
    if await db.get(Category, parent_id) is None:
        raise InvalidParentError("Parent category not found")
    if category_id is not None:
        descendants = collect_descendant_ids(category_id, await load_children_map(db))
        if parent_id in descendants:
            raise InvalidParentError("A category cannot be moved under its own descendant")


async def create_category(db: AsyncSession, data: CategoryForm) -> Category:
    await _check_parent(db, data.parent_id)
    category = Category(name=data.name, parent_id=data.parent_id)
    db.add(category)
    await db.flush()
    return await get_category(db, category.id)


async def update_category(db: AsyncSession, category_id: UUID, data: CategoryForm) -> Category:
    category = await get_category(db, category_id)
    await _check_parent(db, data.parent_id, category_id)
    category.name = data.name
    category.parent_id = data.parent_id
    await db.flush()
    db.expire(category, ["parent"])
    return await get_category(db, category_id)


async def delete_category(db: AsyncSession, category_id: UUID) -> None:
    """Delete a category; its children become roots."""
    category = await get_category(db, category_id)
    await db.delete(category)
    await db.flush()
