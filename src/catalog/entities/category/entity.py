"""Entity: Category."""

from typing import Annotated, Any

from pydantic import BaseModel, Field, StringConstraints, field_validator

from src.catalog.entities._base import Entity

CategoryName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)
]


class CategorySummary(BaseModel):
    """The slice of a category embedded in product responses."""

    id: int = Field(description="Category identifier")
    name: str = Field(description="Category name")


class Category(Entity):
    """Category entity representing a grouping of products.

    ``product_count`` is only populated when a listing asks for it and is
    computed live from the association table.
    """

    name: str = Field(description="Unique category name")
    description: str | None = Field(default=None, description="Free-form description")
    product_count: int | None = Field(
        default=None, description="Number of associated products, when requested"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare categories by business attributes, ignoring timestamps."""
        if not isinstance(other, Category):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.description == other.description
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name))


class CategoryCreate(BaseModel):
    """Accepted payload for creating a category."""

    name: CategoryName = Field(description="Unique category name, 1-100 characters")
    description: str | None = Field(default=None, description="Optional description")


class CategoryUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied.

    An explicit ``description: null`` clears the description; ``name`` may be
    omitted but never nulled.
    """

    name: CategoryName | None = Field(default=None, description="New category name")
    description: str | None = Field(default=None, description="New description, or null to clear")

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly present in the request."""
        return self.model_dump(exclude_unset=True)
