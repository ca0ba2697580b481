"""Product/category association table."""

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import Field, SQLModel


class ProductCategoryTable(SQLModel, table=True):
    """One row per (product, category) membership.

    Both keys cascade on delete so association rows never outlive either owner.
    """

    __tablename__ = "product_categories"

    product_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("products.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    category_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("categories.id", ondelete="CASCADE"),
            primary_key=True,
            index=True,
        )
    )
