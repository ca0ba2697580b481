from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy import func
from sqlmodel import Session, col, select

from src.catalog.core.errors import ConflictError, NotFoundError
from src.catalog.core.query import Page, build_product_query
from src.catalog.core.services.database.db_session import DbSessionService
from src.catalog.core.validation import validate_category_create, validate_category_update
from src.catalog.entities.category.entity import Category, CategoryCreate, CategoryUpdate
from src.catalog.entities.category.table import CategoryTable
from src.catalog.entities.product.entity import Product
from src.catalog.entities.product.repository import fetch_product_page
from src.catalog.entities.product_category.table import ProductCategoryTable
from src.catalog.runtime.context import get_config


class CategoryRepository:
    """Data-access layer for categories.

    Deleting a category removes its association rows and leaves the products
    themselves in place, each with one category fewer.
    """

    def __init__(self, db: DbSessionService, timeout: float | None = None) -> None:
        self._db = db
        self._timeout = (
            timeout if timeout is not None else get_config().catalog.transaction_timeout_seconds
        )

    def create(self, request: CategoryCreate | Mapping[str, Any]) -> Category:
        request = validate_category_create(request)

        with self._db.transaction(self._timeout) as session:
            self._ensure_name_available(session, request.name)
            row = CategoryTable(**request.model_dump())
            session.add(row)
            session.flush()
            category = Category.model_validate(row, from_attributes=True)

        logger.info("Created category {} ({})", category.id, category.name)
        return category

    def get(self, category_id: int) -> Category:
        with self._db.transaction(self._timeout) as session:
            return Category.model_validate(
                self._get_row(session, category_id), from_attributes=True
            )

    def list(self, include_product_count: bool = False) -> list[Category]:
        """All categories ordered by name.

        With ``include_product_count`` each category carries a live count of
        its associated products.
        """
        with self._db.transaction(self._timeout) as session:
            if not include_product_count:
                rows = session.exec(select(CategoryTable).order_by(col(CategoryTable.name)))
                return [Category.model_validate(row, from_attributes=True) for row in rows]

            statement = (
                select(CategoryTable, func.count(col(ProductCategoryTable.product_id)))
                .outerjoin(
                    ProductCategoryTable,
                    col(ProductCategoryTable.category_id) == col(CategoryTable.id),
                )
                .group_by(col(CategoryTable.id))
                .order_by(col(CategoryTable.name))
            )
            categories = []
            for row, product_count in session.exec(statement):
                category = Category.model_validate(row, from_attributes=True)
                category.product_count = product_count
                categories.append(category)
            return categories

    def update(self, category_id: int, request: CategoryUpdate | Mapping[str, Any]) -> Category:
        request = validate_category_update(request)

        with self._db.transaction(self._timeout) as session:
            row = self._get_row(session, category_id)
            changes = request.changes()

            if "name" in changes and changes["name"] != row.name:
                self._ensure_name_available(session, changes["name"], exclude_id=category_id)

            for field, value in changes.items():
                setattr(row, field, value)
            row.touch()
            session.add(row)
            session.flush()
            category = Category.model_validate(row, from_attributes=True)

        logger.bind(fields=sorted(changes)).info("Updated category {}", category_id)
        return category

    def delete(self, category_id: int) -> None:
        """Delete a category and every association that references it."""
        with self._db.transaction(self._timeout) as session:
            row = self._get_row(session, category_id)
            links = session.exec(
                select(ProductCategoryTable).where(
                    col(ProductCategoryTable.category_id) == category_id
                )
            ).all()
            for link in links:
                session.delete(link)
            session.flush()
            session.delete(row)

        logger.info("Deleted category {} and detached {} product(s)", category_id, len(links))

    def list_products(
        self,
        category_id: int,
        page: int | None = None,
        page_size: int | None = None,
    ) -> Page[Product]:
        """Products associated with the category, ordered by product id."""
        plan = build_product_query(page=page, page_size=page_size, category_id=category_id)

        with self._db.transaction(self._timeout) as session:
            self._get_row(session, category_id)
            return fetch_product_page(session, plan)

    def _get_row(self, session: Session, category_id: int) -> CategoryTable:
        row = session.get(CategoryTable, category_id)
        if row is None:
            raise NotFoundError("Category", category_id)
        return row

    def _ensure_name_available(
        self, session: Session, name: str, exclude_id: int | None = None
    ) -> None:
        statement = select(CategoryTable.id).where(col(CategoryTable.name) == name)
        if exclude_id is not None:
            statement = statement.where(col(CategoryTable.id) != exclude_id)
        if session.exec(statement).first() is not None:
            raise ConflictError(f"Category with name '{name}' already exists", field="name")
