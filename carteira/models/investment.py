"""Monthly investment record model."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carteira.database import Base
from carteira.models.base import TimestampMixin, UUIDMixin, cents_column
from carteira.models.catalog import Asset, Bank
from carteira.models.client import Client

# Order matters: it is the column order of every totals row
MONETARY_FIELDS: tuple[str, ...] = (
    "previous_balance",
    "monthly_yield",
    "monthly_dividends",
    "amount_applied",
    "amount_redeemed",
    "incurred_tax",
    "projected_tax",
    "gross_balance",
    "net_balance",
)


class Investment(Base, UUIDMixin, TimestampMixin):
    """
    Snapshot of one asset held by one client at one bank for one month.

    ``date`` is the last day of the period; ``year``/``month`` are kept as
    zero-padded strings (``"2024"``, ``"03"``) for grouping and filtering.
    All monetary columns are integer cents.
    """

    __tablename__ = "investments"
    __table_args__ = (
        Index("ix_investments_period", "year", "month"),
        Index("ix_investments_position", "client_id", "bank_id", "asset_id"),
    )

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    year: Mapped[str] = mapped_column(String(4), nullable=False)
    month: Mapped[str] = mapped_column(String(2), nullable=False)

    client_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
    )
    bank_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("banks.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    asset_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("assets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    previous_balance: Mapped[int] = cents_column()
    monthly_yield: Mapped[int] = cents_column()
    monthly_dividends: Mapped[int] = cents_column()
    amount_applied: Mapped[int] = cents_column()
    amount_redeemed: Mapped[int] = cents_column()
    incurred_tax: Mapped[int] = cents_column()
    projected_tax: Mapped[int] = cents_column()
    gross_balance: Mapped[int] = cents_column()
    net_balance: Mapped[int] = cents_column()

    client: Mapped[Client] = relationship(back_populates="investments")
    bank: Mapped[Bank] = relationship()
    asset: Mapped[Asset] = relationship()

    def __repr__(self) -> str:
        return f"<Investment {self.year}-{self.month} {self.gross_balance}>"
