"""Pydantic schemas for banks, asset types, categories and assets."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints, model_validator

from carteira.schemas.base import BaseResponse
from carteira.schemas.forms import MultiValue, OptionalId

EntityName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255)]


class BankForm(BaseModel):
    name: EntityName


class AssetTypeForm(BaseModel):
    name: EntityName


class CategoryForm(BaseModel):
    """Create/update payload for a category; a blank parent makes it a root."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    parent_id: OptionalId = None


class AssetForm(BaseModel):
    name: EntityName
    asset_type_id: OptionalId = None
    category_ids: Annotated[list[UUID], MultiValue] = Field(default_factory=list)
    auto_yield: bool = False

    @model_validator(mode="after")
    def dedupe_categories(self) -> "AssetForm":
        # Keep submission order; the first category is the primary one
        self.category_ids = list(dict.fromkeys(self.category_ids))
        return self


class BankResponse(BaseResponse):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class AssetTypeResponse(BaseResponse):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class CategoryResponse(BaseResponse):
    id: UUID
    name: str
    parent_id: UUID | None
    parent_name: str | None = None
    created_at: datetime
    updated_at: datetime


class CategoryRef(BaseResponse):
    id: UUID
    name: str


class CategoryDescendantsResponse(BaseModel):
    category_id: UUID
    category_ids: list[UUID]


class AssetResponse(BaseResponse):
    id: UUID
    name: str
    asset_type_id: UUID | None
    asset_type_name: str | None = None
    auto_yield: bool
    categories: list[CategoryRef] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
