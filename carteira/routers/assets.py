"""Asset management API router."""

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from carteira.config import settings
from carteira.deps import DbSession
from carteira.logger import get_logger, log_exception
from carteira.models import Asset
from carteira.schemas import AssetForm, AssetResponse, CategoryRef, FormState, PageResponse
from carteira.services import assets as asset_service
from carteira.services.assets import AssetNotFoundError, AssetReferenceError
from carteira.services.pagination import count_pages
from carteira.utils.exceptions import raise_conflict, raise_internal_error, raise_not_found
from carteira.utils.forms import (
    form_failure,
    form_response,
    parse_form,
    read_form,
    redirect_to,
    store_failure,
    update_target_missing,
)

router = APIRouter(prefix="/assets", tags=["assets"])
logger = get_logger(__name__)

ENTITY = "asset"
LIST_PATH = "/assets"
LIST_FIELDS = ("category_ids",)


def _to_response(asset: Asset) -> AssetResponse:
    return AssetResponse(
        id=asset.id,
        name=asset.name,
        asset_type_id=asset.asset_type_id,
        asset_type_name=asset.asset_type.name if asset.asset_type else None,
        auto_yield=asset.auto_yield,
        categories=[CategoryRef.model_validate(category) for category in asset.categories],
        created_at=asset.created_at,
        updated_at=asset.updated_at,
    )


def _bad_reference(error: AssetReferenceError, data: dict) -> Response:
    return form_failure(
        str(error),
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        data,
        errors={error.field: [str(error)]},
    )


@router.get("", response_model=PageResponse[AssetResponse])
async def list_assets(
    db: DbSession,
    query: str | None = None,
    category_id: UUID | None = None,
    page: int = Query(1, ge=1),
) -> PageResponse[AssetResponse]:
    """Search assets by asset or asset type name, optionally within a category subtree."""
    page_size = settings.assets_page_size
    items, total = await asset_service.list_assets(db, query, page, page_size, category_id=category_id)
    return PageResponse[AssetResponse](
        items=[_to_response(asset) for asset in items],
        total=total,
        page=page,
        total_pages=count_pages(total, page_size, minimum=1),
    )


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(asset_id: UUID, db: DbSession) -> AssetResponse:
    try:
        asset = await asset_service.get_asset(db, asset_id)
    except AssetNotFoundError as e:
        logger.debug("Asset not found", asset_id=str(asset_id))
        raise_not_found("Asset", cause=e)
    return _to_response(asset)


@router.post("", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def create_asset(request: Request, db: DbSession) -> Response:
    data = await read_form(request, LIST_FIELDS)
    form = parse_form(AssetForm, data, action="create", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        asset = await asset_service.create_asset(db, form)
        await db.commit()
    except AssetReferenceError as e:
        return _bad_reference(e, data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="create", entity=ENTITY, data=data)

    logger.info("Asset created", asset_id=str(asset.id), categories=len(form.category_ids))
    return redirect_to(LIST_PATH)


@router.post("/{asset_id}", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def update_asset(asset_id: UUID, request: Request, db: DbSession) -> Response:
    data = await read_form(request, LIST_FIELDS)
    try:
        await asset_service.get_asset(db, asset_id)
    except AssetNotFoundError:
        logger.debug("Asset not found for update", asset_id=str(asset_id))
        return update_target_missing(ENTITY, data)

    form = parse_form(AssetForm, data, action="update", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await asset_service.update_asset(db, asset_id, form)
        await db.commit()
    except AssetReferenceError as e:
        return _bad_reference(e, data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="update", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(asset_id: UUID, db: DbSession) -> None:
    try:
        await asset_service.delete_asset(db, asset_id)
        await db.commit()
    except AssetNotFoundError as e:
        raise_not_found("Asset", cause=e)
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Asset still referenced", asset_id=str(asset_id))
        raise_conflict("Cannot delete asset while investments reference it.", cause=e)
    except SQLAlchemyError as e:
        await db.rollback()
        log_exception(logger, e, "Failed to delete asset", asset_id=str(asset_id))
        raise_internal_error("Database Error: Failed to delete asset.", cause=e)
