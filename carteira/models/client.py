"""Client and invoice models."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, Enum as SQLEnum, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carteira.database import Base
from carteira.models.base import TimestampMixin, UUIDMixin, cents_column

if TYPE_CHECKING:
    from carteira.models.investment import Investment


class InvoiceStatus(str, Enum):
    """Invoice settlement status."""

    PENDING = "pending"
    PAID = "paid"


class Client(Base, UUIDMixin, TimestampMixin):
    """Person or family whose investments are tracked."""

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    invoices: Mapped[list[Invoice]] = relationship(back_populates="client", passive_deletes=True)
    investments: Mapped[list[Investment]] = relationship(back_populates="client", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Client {self.name}>"


class Invoice(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "invoices"

    client_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = cents_column()
    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(
            InvoiceStatus,
            name="invoice_status_enum",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=InvoiceStatus.PENDING,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    client: Mapped[Client] = relationship(back_populates="invoices")

    def __repr__(self) -> str:
        return f"<Invoice {self.date} {self.amount} {self.status.value}>"
