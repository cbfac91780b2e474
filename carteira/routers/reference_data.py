"""Bank and asset type API routers.

Both are flat name lists with the same endpoints, so one factory builds each.
"""

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from carteira.config import settings
from carteira.deps import DbSession
from carteira.logger import get_logger, log_exception
from carteira.models import AssetType, Bank
from carteira.schemas import (
    AssetTypeForm,
    AssetTypeResponse,
    BankForm,
    BankResponse,
    FormState,
    PageResponse,
)
from carteira.services import reference_data as reference_service
from carteira.services.pagination import count_pages
from carteira.services.reference_data import DuplicateNameError, ReferenceNotFoundError
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

logger = get_logger(__name__)

DUPLICATE_NAME_MESSAGE = "This name is already in use."


def _duplicate_name(entity: str, data: dict) -> Response:
    return form_failure(
        f"Failed to save {entity}: name already exists.",
        status.HTTP_409_CONFLICT,
        data,
        errors={"name": [DUPLICATE_NAME_MESSAGE]},
    )


def build_reference_router(
    *,
    model: type[Bank] | type[AssetType],
    prefix: str,
    entity: str,
    form_model: type[BaseModel],
    response_model: type[BaseModel],
    page_size_setting: str,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[prefix.strip("/")])
    label = entity.capitalize()

    @router.get("", response_model=PageResponse[response_model])
    async def list_entities(
        db: DbSession,
        query: str | None = None,
        page: int = Query(1, ge=1),
    ) -> PageResponse:
        page_size = getattr(settings, page_size_setting)
        items, total = await reference_service.list_named(db, model, query, page, page_size)
        return PageResponse[response_model](
            items=[response_model.model_validate(item) for item in items],
            total=total,
            page=page,
            total_pages=count_pages(total, page_size),
        )

    @router.get("/{entity_id}", response_model=response_model)
    async def get_entity(entity_id: UUID, db: DbSession) -> BaseModel:
        try:
            item = await reference_service.get_named(db, model, entity_id)
        except ReferenceNotFoundError as e:
            logger.debug(f"{label} not found", entity_id=str(entity_id))
            raise_not_found(label, cause=e)
        return response_model.model_validate(item)

    @router.post("", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
    async def create_entity(request: Request, db: DbSession) -> Response:
        data = await read_form(request)
        form = parse_form(form_model, data, action="create", entity=entity)
        if isinstance(form, FormState):
            return form_response(form)

        try:
            await reference_service.create_named(db, model, form.name)
            await db.commit()
        except DuplicateNameError:
            logger.warning(f"Duplicate {entity} name", name=form.name)
            return _duplicate_name(entity, data)
        except IntegrityError:
            await db.rollback()
            logger.warning(f"Duplicate {entity} name on insert", name=form.name)
            return _duplicate_name(entity, data)
        except SQLAlchemyError as e:
            return await store_failure(db, e, logger, action="create", entity=entity, data=data)

        return redirect_to(prefix)

    @router.post("/{entity_id}", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
    async def update_entity(entity_id: UUID, request: Request, db: DbSession) -> Response:
        data = await read_form(request)
        try:
            await reference_service.get_named(db, model, entity_id)
        except ReferenceNotFoundError:
            logger.debug(f"{label} not found for update", entity_id=str(entity_id))
            return update_target_missing(entity, data)

        form = parse_form(form_model, data, action="update", entity=entity)
        if isinstance(form, FormState):
            return form_response(form)

        try:
            await reference_service.update_named(db, model, entity_id, form.name)
            await db.commit()
        except DuplicateNameError:
            logger.warning(f"Duplicate {entity} name", name=form.name)
            return _duplicate_name(entity, data)
        except IntegrityError:
            await db.rollback()
            return _duplicate_name(entity, data)
        except SQLAlchemyError as e:
            return await store_failure(db, e, logger, action="update", entity=entity, data=data)

        return redirect_to(prefix)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entity(entity_id: UUID, db: DbSession) -> None:
        try:
            await reference_service.delete_named(db, model, entity_id)
            await db.commit()
        except ReferenceNotFoundError as e:
            raise_not_found(label, cause=e)
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"{label} still referenced", entity_id=str(entity_id))
            raise_conflict(f"Cannot delete {entity} while investments reference it.", cause=e)
        except SQLAlchemyError as e:
            await db.rollback()
            log_exception(logger, e, f"Failed to delete {entity}", entity_id=str(entity_id))
            raise_internal_error(f"Database Error: Failed to delete {entity}.", cause=e)

    return router


banks_router = build_reference_router(
    model=Bank,
    prefix="/banks",
    entity="bank",
    form_model=BankForm,
    response_model=BankResponse,
    page_size_setting="banks_page_size",
)

asset_types_router = build_reference_router(
    model=AssetType,
    prefix="/asset-types",
    entity="asset type",
    form_model=AssetTypeForm,
    response_model=AssetTypeResponse,
    page_size_setting="asset_types_page_size",
)
