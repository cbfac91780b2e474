"""Category tree resolution.

A category filter must also match assets filed under any sub-category, so a
selected id is expanded into itself plus all of its transitive descendants.
"""

from collections import defaultdict, deque
from collections.abc import Iterable, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carteira.logger import get_logger
from carteira.models import Category

logger = get_logger(__name__)


def build_children_map(edges: Iterable[tuple[UUID, UUID | None]]) -> dict[UUID, list[UUID]]:
    """Index ``(id, parent_id)`` pairs by parent."""
    children: dict[UUID, list[UUID]] = defaultdict(list)
    for category_id, parent_id in edges:
        if parent_id is not None:
            children[parent_id].append(category_id)
    return children


def collect_descendant_ids(root_id: UUID, children_by_parent: Mapping[UUID, Iterable[UUID]]) -> list[UUID]:
    """Breadth-first walk returning ``root_id`` followed by every descendant once.

    A visited set bounds the walk, so corrupted data with a parent cycle
    still terminates.
    """
    ordered = [root_id]
    visited = {root_id}
    queue = deque([root_id])

    while queue:
        current = queue.popleft()
        for child_id in children_by_parent.get(current, ()):
            if child_id in visited:
                continue
            visited.add(child_id)
            ordered.append(child_id)
            queue.append(child_id)

    return ordered


async def load_children_map(db: AsyncSession) -> dict[UUID, list[UUID]]:
    result = await db.execute(select(Category.id, Category.parent_id))
    return build_children_map((row.id, row.parent_id) for row in result)


async def resolve_category_ids(db: AsyncSession, category_id: UUID | None) -> list[UUID]:
    """Expand a category id into itself plus all transitive descendants.

    Returns an empty list when no category is selected. An id that does not
    exist resolves to just itself.
    """
    if not category_id:
        return []

    children = await load_children_map(db)
    resolved = collect_descendant_ids(category_id, children)
    logger.debug("Category filter resolved", category_id=str(category_id), resolved=len(resolved))
    return resolved
