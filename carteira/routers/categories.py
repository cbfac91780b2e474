"""Category tree API router."""

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError

from carteira.config import settings
from carteira.deps import DbSession
from carteira.logger import get_logger, log_exception
from carteira.models import Category
from carteira.schemas import (
    CategoryDescendantsResponse,
    CategoryForm,
    CategoryResponse,
    FormState,
    PageResponse,
)
from carteira.services import categories as category_service
from carteira.services.categories import CategoryNotFoundError, InvalidParentError
from carteira.services.category_tree import resolve_category_ids
from carteira.services.pagination import count_pages
from carteira.utils.exceptions import raise_internal_error, raise_not_found
from carteira.utils.forms import (
    form_failure,
    form_response,
    parse_form,
    read_form,
    redirect_to,
    store_failure,
    update_target_missing,
)

router = APIRouter(prefix="/categories", tags=["categories"])
logger = get_logger(__name__)

ENTITY = "category"
LIST_PATH = "/categories"


def _to_response(category: Category) -> CategoryResponse:
    response = CategoryResponse.model_validate(category)
    if category.parent is not None:
        response.parent_name = category.parent.name
    return response


def _invalid_parent(error: InvalidParentError, data: dict) -> Response:
    return form_failure(
        "Invalid parent category.",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        data,
        errors={"parent_id": [str(error)]},
    )


@router.get("", response_model=PageResponse[CategoryResponse])
async def list_categories(
    db: DbSession,
    query: str | None = None,
    page: int = Query(1, ge=1),
) -> PageResponse[CategoryResponse]:
    page_size = settings.categories_page_size
    items, total = await category_service.list_categories(db, query, page, page_size)
    return PageResponse[CategoryResponse](
        items=[_to_response(category) for category in items],
        total=total,
        page=page,
        total_pages=count_pages(total, page_size),
    )


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: UUID, db: DbSession) -> CategoryResponse:
    try:
        category = await category_service.get_category(db, category_id)
    except CategoryNotFoundError as e:
        logger.debug("Category not found", category_id=str(category_id))
        raise_not_found("Category", cause=e)
    return _to_response(category)


@router.get("/{category_id}/descendants", response_model=CategoryDescendantsResponse)
async def get_category_descendants(category_id: UUID, db: DbSession) -> CategoryDescendantsResponse:
    """The category id followed by every transitive sub-category id."""
    return CategoryDescendantsResponse(
        category_id=category_id,
        category_ids=await resolve_category_ids(db, category_id),
    )


@router.post("", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def create_category(request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    form = parse_form(CategoryForm, data, action="create", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await category_service.create_category(db, form)
        await db.commit()
    except InvalidParentError as e:
        return _invalid_parent(e, data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="create", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.post("/{category_id}", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def update_category(category_id: UUID, request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    try:
        await category_service.get_category(db, category_id)
    except CategoryNotFoundError:
        logger.debug("Category not found for update", category_id=str(category_id))
        return update_target_missing(ENTITY, data)

    form = parse_form(CategoryForm, data, action="update", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await category_service.update_category(db, category_id, form)
        await db.commit()
    except InvalidParentError as e:
        await db.rollback()
        return _invalid_parent(e, data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="update", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: UUID, db: DbSession) -> None:
    """Delete a category; its sub-categories become roots."""
    try:
        await category_service.delete_category(db, category_id)
        await db.commit()
    except CategoryNotFoundError as e:
        raise_not_found("Category", cause=e)
    except SQLAlchemyError as e:
        await db.rollback()
        log_exception(logger, e, "Failed to delete category", category_id=str(category_id))
        raise_internal_error("Database Error: Failed to delete category.", cause=e)
