"""Filter and pagination plans for listing queries.

The builders only describe a query; repositories turn the plan into SQL.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

from src.catalog.core.errors import FieldViolation, ValidationFailed
from src.catalog.runtime.context import get_config

ItemT = TypeVar("ItemT")

# Largest OFFSET a 64-bit SQL integer can hold
MAX_OFFSET = 2**63 - 1


class PageWindow(BaseModel):
    """Resolved page number and size with the matching offset/limit."""

    page: int = Field(ge=1)
    page_size: int = Field(ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class ProductQueryPlan(BaseModel):
    """Restrictions, ordering and window for a product listing."""

    category_id: int | None = None
    in_stock: bool | None = None
    window: PageWindow
    order_by: str = "id"

    @property
    def offset(self) -> int:
        return self.window.offset

    @property
    def limit(self) -> int:
        return self.window.limit


class Page(BaseModel, Generic[ItemT]):
    """One page of results plus the total matching the filter."""

    items: list[ItemT]
    total: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size


def build_page_window(
    page: int | None = None,
    page_size: int | None = None,
    *,
    default_page_size: int | None = None,
    max_page_size: int | None = None,
) -> PageWindow:
    """Resolve caller-supplied paging into a bounded window.

    Missing values fall back to page 1 and the configured default size.
    Sizes above the configured maximum are clamped; values below 1, or a
    page whose offset would overflow a 64-bit integer, are rejected.
    """
    limits = get_config().catalog
    default_page_size = default_page_size or limits.default_page_size
    max_page_size = max_page_size or limits.max_page_size

    violations = []
    if page is not None and page < 1:
        violations.append(FieldViolation(field="page", message="page must be at least 1"))
    if page_size is not None and page_size < 1:
        violations.append(
            FieldViolation(field="page_size", message="page_size must be at least 1")
        )
    if violations:
        raise ValidationFailed(violations)

    resolved_size = min(page_size or default_page_size, max_page_size)
    window = PageWindow(page=page or 1, page_size=resolved_size)
    if window.offset > MAX_OFFSET:
        raise ValidationFailed.single("page", "page is too large")
    return window


def build_product_query(
    page: int | None = None,
    page_size: int | None = None,
    category_id: int | None = None,
    in_stock: bool | None = None,
) -> ProductQueryPlan:
    """Describe a product listing: optional category join, stock flag, window."""
    return ProductQueryPlan(
        category_id=category_id,
        in_stock=in_stock,
        window=build_page_window(page, page_size),
    )
