"""Client management API router."""

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError

from carteira.config import settings
from carteira.deps import DbSession
from carteira.logger import get_logger, log_exception
from carteira.schemas import ClientForm, ClientResponse, FormState, PageResponse
from carteira.services import clients as client_service
from carteira.services.clients import ClientNotFoundError
from carteira.services.pagination import count_pages
from carteira.utils.exceptions import raise_internal_error, raise_not_found
from carteira.utils.forms import (
    form_response,
    parse_form,
    read_form,
    redirect_to,
    store_failure,
    update_target_missing,
)

router = APIRouter(prefix="/clients", tags=["clients"])
logger = get_logger(__name__)

ENTITY = "client"
LIST_PATH = "/clients"


@router.get("", response_model=PageResponse[ClientResponse])
async def list_clients(
    db: DbSession,
    query: str | None = None,
    page: int = Query(1, ge=1),
) -> PageResponse[ClientResponse]:
    """Search clients by name or email."""
    page_size = settings.clients_page_size
    items, total = await client_service.list_clients(db, query, page, page_size)
    return PageResponse[ClientResponse](
        items=[ClientResponse.model_validate(client) for client in items],
        total=total,
        page=page,
        total_pages=count_pages(total, page_size),
    )


@router.get("/all", response_model=list[ClientResponse])
async def list_all_clients(db: DbSession) -> list[ClientResponse]:
    """Every client ordered by name, for select inputs."""
    return [ClientResponse.model_validate(client) for client in await client_service.list_all_clients(db)]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: UUID, db: DbSession) -> ClientResponse:
    try:
        client = await client_service.get_client(db, client_id)
    except ClientNotFoundError as e:
        logger.debug("Client not found", client_id=str(client_id))
        raise_not_found("Client", cause=e)
    return ClientResponse.model_validate(client)


@router.post("", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def create_client(request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    form = parse_form(ClientForm, data, action="create", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        client = await client_service.create_client(db, form)
        await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="create", entity=ENTITY, data=data)

    logger.info("Client created", client_id=str(client.id))
    return redirect_to(LIST_PATH)


@router.post("/{client_id}", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def update_client(client_id: UUID, request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    try:
        await client_service.get_client(db, client_id)
    except ClientNotFoundError:
        logger.debug("Client not found for update", client_id=str(client_id))
        return update_target_missing(ENTITY, data)

    form = parse_form(ClientForm, data, action="update", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await client_service.update_client(db, client_id, form)
        await db.commit()
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="update", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: UUID, db: DbSession) -> None:
    """Delete a client with its invoices and investment records."""
    try:
        await client_service.delete_client(db, client_id)
        await db.commit()
    except ClientNotFoundError as e:
        logger.debug("Client not found for deletion", client_id=str(client_id))
        raise_not_found("Client", cause=e)
    except SQLAlchemyError as e:
        await db.rollback()
        log_exception(logger, e, "Failed to delete client", client_id=str(client_id))
        raise_internal_error("Database Error: Failed to delete client.", cause=e)
