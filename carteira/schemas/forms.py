"""Form submission state and shared form field types."""

from collections import defaultdict
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from carteira.utils.formatting import parse_currency


class FormState(BaseModel):
    """Outcome of a rejected form submission.

    ``errors`` maps a field name to its messages; ``submitted_data`` echoes the
    raw values so the form can be re-rendered as the user left it.
    """

    errors: dict[str, list[str]] = Field(default_factory=dict)
    message: str | None = None
    submitted_data: dict[str, Any] | None = None


def errors_by_field(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = defaultdict(list)
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if not isinstance(part, int)]
        field = ".".join(loc) or "form"
        message = error["msg"].removeprefix("Value error, ")
        errors[field].append(message)
    return dict(errors)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_money(value: Any) -> Any:
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        cents = parse_currency(value)
        if cents is None:
            raise ValueError("Invalid amount")
        return cents
    return value


def _zero_if_none(value: Any) -> Any:
    value = _parse_money(value)
    return 0 if value is None else value


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list | tuple):
        return [item for item in value if not (isinstance(item, str) and not item.strip())]
    return value


OptionalId = Annotated[UUID | None, BeforeValidator(_blank_to_none)]
Cents = Annotated[int, BeforeValidator(_zero_if_none)]
OptionalCents = Annotated[int | None, BeforeValidator(_parse_money)]
MultiValue = BeforeValidator(_as_list)
