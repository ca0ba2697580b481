"""Entity: Product."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    Field,
    StrictInt,
    StringConstraints,
    ValidationInfo,
    field_validator,
)

from src.catalog.entities._base import Entity
from src.catalog.entities.category.entity import CategorySummary

ProductName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]
Price = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
Sku = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


def _dedupe(category_ids: list[int]) -> list[int]:
    return list(dict.fromkeys(category_ids))


def _blank_to_none(value: str | None) -> str | None:
    return value or None


class Product(Entity):
    """Product entity together with the categories it belongs to.

    ``categories`` is always ordered by category id so repeated reads of
    unchanged data are identical.
    """

    name: str = Field(description="Product name")
    description: str | None = Field(default=None, description="Free-form description")
    price: Decimal = Field(description="Non-negative fixed-point price")
    sku: str | None = Field(default=None, description="Stock keeping unit, unique when set")
    in_stock: bool = Field(default=True, description="Availability flag")
    categories: list[CategorySummary] = Field(default_factory=list)

    @property
    def category_ids(self) -> list[int]:
        return [category.id for category in self.categories]

    def __eq__(self, other: Any) -> bool:
        """Compare products by business attributes, ignoring timestamps."""
        if not isinstance(other, Product):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.description == other.description
            and self.price == other.price
            and self.sku == other.sku
            and self.in_stock == other.in_stock
            and self.categories == other.categories
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.sku))


class ProductCreate(BaseModel):
    """Accepted payload for creating a product.

    ``category_ids`` must name at least one category; repeated ids are
    collapsed, keeping the first occurrence.
    """

    name: ProductName = Field(description="Product name, 1-255 characters")
    description: str | None = Field(default=None, description="Optional description")
    price: Price = Field(description="Non-negative price with at most two decimals")
    sku: Sku | None = Field(default=None, description="Optional SKU, at most 50 characters")
    in_stock: bool = Field(default=True, description="Availability flag")
    category_ids: list[StrictInt] = Field(min_length=1, description="Categories to attach")

    @field_validator("sku")
    @classmethod
    def _normalize_sku(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @field_validator("category_ids")
    @classmethod
    def _dedupe_category_ids(cls, value: list[int]) -> list[int]:
        return _dedupe(value)


class ProductUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied.

    ``description`` and ``sku`` may be nulled to clear them. ``category_ids``
    replaces the whole association set when present; an empty list removes
    every association and ``null`` is the same as omitting it.
    """

    name: ProductName | None = None
    description: str | None = None
    price: Price | None = None
    sku: Sku | None = None
    in_stock: bool | None = None
    category_ids: list[StrictInt] | None = None

    @field_validator("name", "price", "in_stock")
    @classmethod
    def _required_not_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("sku")
    @classmethod
    def _normalize_sku(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @field_validator("category_ids")
    @classmethod
    def _dedupe_category_ids(cls, value: list[int] | None) -> list[int] | None:
        return None if value is None else _dedupe(value)

    @property
    def replaces_categories(self) -> bool:
        return "category_ids" in self.model_fields_set and self.category_ids is not None

    def changes(self) -> dict[str, Any]:
        """Row fields explicitly present in the request."""
        return self.model_dump(exclude_unset=True, exclude={"category_ids"})
