"""Invoice API router."""

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError

from carteira.config import settings
from carteira.deps import DbSession
from carteira.logger import get_logger, log_exception
from carteira.models import Invoice
from carteira.schemas import FormState, InvoiceForm, InvoiceResponse, PageResponse
from carteira.services import invoices as invoice_service
from carteira.services.invoices import InvoiceClientNotFoundError, InvoiceNotFoundError
from carteira.services.pagination import count_pages
from carteira.utils.exceptions import raise_internal_error, raise_not_found
from carteira.utils.formatting import format_currency, format_date_local
from carteira.utils.forms import (
    form_failure,
    form_response,
    parse_form,
    read_form,
    redirect_to,
    store_failure,
    update_target_missing,
)

router = APIRouter(prefix="/invoices", tags=["invoices"])
logger = get_logger(__name__)

ENTITY = "invoice"
LIST_PATH = "/invoices"


def to_invoice_response(invoice: Invoice) -> InvoiceResponse:
    response = InvoiceResponse.model_validate(invoice)
    response.client_name = invoice.client.name
    response.client_email = invoice.client.email
    response.amount_display = format_currency(invoice.amount)
    response.date_display = format_date_local(invoice.date)
    return response


def _unknown_client(data: dict) -> Response:
    return form_failure(
        "Client not found.",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        data,
        errors={"client_id": ["Client not found"]},
    )


@router.get("", response_model=PageResponse[InvoiceResponse])
async def list_invoices(
    db: DbSession,
    query: str | None = None,
    page: int = Query(1, ge=1),
) -> PageResponse[InvoiceResponse]:
    """Search invoices by client name/email, status or exact amount."""
    page_size = settings.invoices_page_size
    items, total = await invoice_service.list_invoices(db, query, page, page_size)
    return PageResponse[InvoiceResponse](
        items=[to_invoice_response(invoice) for invoice in items],
        total=total,
        page=page,
        total_pages=count_pages(total, page_size),
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: UUID, db: DbSession) -> InvoiceResponse:
    try:
        invoice = await invoice_service.get_invoice(db, invoice_id)
    except InvoiceNotFoundError as e:
        logger.debug("Invoice not found", invoice_id=str(invoice_id))
        raise_not_found("Invoice", cause=e)
    return to_invoice_response(invoice)


@router.post("", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def create_invoice(request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    form = parse_form(InvoiceForm, data, action="create", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await invoice_service.create_invoice(db, form)
        await db.commit()
    except InvoiceClientNotFoundError:
        return _unknown_client(data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="create", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.post("/{invoice_id}", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def update_invoice(invoice_id: UUID, request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    try:
        await invoice_service.get_invoice(db, invoice_id)
    except InvoiceNotFoundError:
        logger.debug("Invoice not found for update", invoice_id=str(invoice_id))
        return update_target_missing(ENTITY, data)

    form = parse_form(InvoiceForm, data, action="update", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await invoice_service.update_invoice(db, invoice_id, form)
        await db.commit()
    except InvoiceClientNotFoundError:
        return _unknown_client(data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="update", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: UUID, db: DbSession) -> None:
    try:
        await invoice_service.delete_invoice(db, invoice_id)
        await db.commit()
    except InvoiceNotFoundError as e:
        raise_not_found("Invoice", cause=e)
    except SQLAlchemyError as e:
        await db.rollback()
        log_exception(logger, e, "Failed to delete invoice", invoice_id=str(invoice_id))
        raise_internal_error("Database Error: Failed to delete invoice.", cause=e)
