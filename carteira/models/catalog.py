"""Reference data: banks, asset types, the category tree and assets."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carteira.database import Base
from carteira.models.base import TimestampMixin, UUIDMixin


class Bank(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "banks"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Bank {self.name}>"


class AssetType(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "asset_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<AssetType {self.name}>"


class Category(Base, UUIDMixin, TimestampMixin):
    """
    Tree-structured label for assets.

    Depth is unbounded; a category with ``parent_id = NULL`` is a root.
    Removing a parent detaches its children instead of deleting them.
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    parent: Mapped[Category | None] = relationship(
        "Category", remote_side="Category.id", back_populates="children"
    )
    children: Mapped[list[Category]] = relationship("Category", back_populates="parent", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class AssetCategory(Base):
    """Ordered association between assets and categories."""

    __tablename__ = "asset_categories"

    asset_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("assets.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    # Order of association; the lowest position is the asset's primary category
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    asset: Mapped[Asset] = relationship(back_populates="category_links")
    category: Mapped[Category] = relationship()


class Asset(Base, UUIDMixin, TimestampMixin):
    """Financial asset held at a bank (fund, bond, CDB, stock...)."""

    __tablename__ = "assets"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    asset_type_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("asset_types.id", ondelete="SET NULL"),
        nullable=True,
    )
    # Monthly yield is derived from the balances instead of being entered
    auto_yield: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    asset_type: Mapped[AssetType | None] = relationship()
    category_links: Mapped[list[AssetCategory]] = relationship(
        back_populates="asset",
        order_by=AssetCategory.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    categories: Mapped[list[Category]] = relationship(
        secondary="asset_categories",
        order_by=AssetCategory.position,
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Asset {self.name}>"
