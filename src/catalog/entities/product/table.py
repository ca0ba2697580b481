"""Product database table model."""

from decimal import Decimal

from sqlalchemy import Boolean, Column, Numeric, String, Text, true
from sqlmodel import Field

from src.catalog.entities._base import EntityTable


class ProductTable(EntityTable, table=True):
    """Database persistence model for products.

    ``price`` is stored as ``NUMERIC(10, 2)`` and read back as ``Decimal``.
    ``sku`` is unique when present; NULLs never collide.
    """

    __tablename__ = "products"

    name: str = Field(sa_column=Column(String(255), nullable=False))
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    price: Decimal = Field(
        sa_column=Column(Numeric(10, 2, asdecimal=True), nullable=False)
    )
    sku: str | None = Field(
        default=None, sa_column=Column(String(50), nullable=True, unique=True)
    )
    in_stock: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default=true(), index=True),
    )
