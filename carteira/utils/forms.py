"""Helpers for the form submission boundary.

Create/update endpoints accept url-encoded form posts, answer ``303 See Other``
on success and a JSON ``FormState`` on failure.
"""

from collections.abc import Iterable
from typing import Any, TypeVar

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.stdlib import BoundLogger

from carteira.logger import log_exception
from carteira.schemas.forms import FormState, errors_by_field

M = TypeVar("M", bound=BaseModel)

MISSING_FIELDS_MESSAGE = "Missing Fields. Failed to {action} {entity}."
STORE_ERROR_MESSAGE = "Database Error: Failed to {action} {entity}."
NOT_FOUND_MESSAGE = "{entity} not found. Cannot update."


async def read_form(request: Request, list_fields: Iterable[str] = ()) -> dict[str, Any]:
    """Flatten submitted form fields; names in ``list_fields`` keep every value."""
    multi = set(list_fields)
    form = await request.form()
    data: dict[str, Any] = {}
    for key, value in form.multi_items():
        if not isinstance(value, str):
            continue
        if key in multi:
            data.setdefault(key, []).append(value)
        else:
            data[key] = value
    return data


def parse_form(model: type[M], data: dict[str, Any], *, action: str, entity: str) -> M | FormState:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        return FormState(
            errors=errors_by_field(exc),
            message=MISSING_FIELDS_MESSAGE.format(action=action, entity=entity),
            submitted_data=data,
        )


def form_response(
    state: FormState,
    status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=state.model_dump(mode="json"))


def form_failure(
    message: str,
    status_code: int,
    data: dict[str, Any],
    errors: dict[str, list[str]] | None = None,
) -> JSONResponse:
    return form_response(
        FormState(errors=errors or {}, message=message, submitted_data=data),
        status_code,
    )


def redirect_to(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=status.HTTP_303_SEE_OTHER)


async def store_failure(
    db: AsyncSession,
    exc: SQLAlchemyError,
    logger: BoundLogger,
    *,
    action: str,
    entity: str,
    data: dict[str, Any],
) -> JSONResponse:
    """Roll back, log and report a failed write as a form-level error."""
    await db.rollback()
    log_exception(logger, exc, f"Failed to {action} {entity}", action=action, entity=entity)
    return form_failure(
        STORE_ERROR_MESSAGE.format(action=action, entity=entity),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        data,
    )


def update_target_missing(entity: str, data: dict[str, Any]) -> JSONResponse:
    return form_failure(
        NOT_FOUND_MESSAGE.format(entity=entity.capitalize()),
        status.HTTP_404_NOT_FOUND,
        data,
    )
