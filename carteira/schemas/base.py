"""Base schema classes and generic types."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class BaseResponse(BaseModel):
    """Base for all response schemas with from_attributes config."""

    model_config = ConfigDict(from_attributes=True)


class PageResponse(BaseModel, Generic[T]):  # noqa: UP046
    """One page of a searchable list.

    ``total`` counts every match of the query, not just the items returned.
    """

    items: list[T]
    total: int
    page: int
    total_pages: int
