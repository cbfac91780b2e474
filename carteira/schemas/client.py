"""Pydantic schemas for clients and invoices."""

import datetime as dt
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator

from carteira.models.client import InvoiceStatus
from carteira.schemas.base import BaseResponse
from carteira.schemas.forms import Cents


class ClientForm(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255)]
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def check_email_length(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not 5 <= len(value) <= 255:
                raise ValueError("Email must be between 5 and 255 characters")
        return value


class InvoiceForm(BaseModel):
    client_id: UUID
    amount: Annotated[Cents, Field(gt=0)]
    status: InvoiceStatus
    date: dt.date | None = None

    @field_validator("date", mode="before")
    @classmethod
    def blank_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ClientResponse(BaseResponse):
    id: UUID
    name: str
    email: str
    created_at: dt.datetime
    updated_at: dt.datetime


class InvoiceResponse(BaseResponse):
    id: UUID
    client_id: UUID
    client_name: str | None = None
    client_email: str | None = None
    amount: int
    status: InvoiceStatus
    date: dt.date
    amount_display: str | None = None
    date_display: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime
