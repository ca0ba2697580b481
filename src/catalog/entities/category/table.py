"""Category database table model."""

from sqlalchemy import Column, String, Text
from sqlmodel import Field

from src.catalog.entities._base import EntityTable


class CategoryTable(EntityTable, table=True):
    """Database persistence model for categories.

    ``name`` is globally unique; the constraint backs up the explicit
    check the repository performs before writing.
    """

    __tablename__ = "categories"

    name: str = Field(sa_column=Column(String(100), nullable=False, unique=True))
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
