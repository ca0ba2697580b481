"""Product repository.

Owns the product lifecycle and the product's category associations. Every
public method runs inside exactly one transaction, so a failure at any step
(unknown category, duplicate SKU, deadline) leaves no trace in storage.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from sqlalchemy import func
from sqlmodel import Session, col, select

from src.catalog.core.errors import ConflictError, NotFoundError
from src.catalog.core.query import Page, ProductQueryPlan, build_product_query
from src.catalog.core.services.database.db_session import DbSessionService
from src.catalog.core.validation import validate_product_create, validate_product_update
from src.catalog.entities.category.entity import CategorySummary
from src.catalog.entities.category.table import CategoryTable
from src.catalog.entities.product.entity import Product, ProductCreate, ProductUpdate
from src.catalog.entities.product.table import ProductTable
from src.catalog.entities.product_category.table import ProductCategoryTable
from src.catalog.runtime.context import get_config


def apply_product_filters(statement: Any, plan: ProductQueryPlan) -> Any:
    """Restrict ``statement`` (selecting from products) according to ``plan``."""
    if plan.category_id is not None:
        statement = statement.join(
            ProductCategoryTable,
            col(ProductCategoryTable.product_id) == col(ProductTable.id),
        ).where(col(ProductCategoryTable.category_id) == plan.category_id)
    if plan.in_stock is not None:
        statement = statement.where(col(ProductTable.in_stock) == plan.in_stock)
    return statement


def load_categories(
    session: Session, product_ids: Sequence[int]
) -> dict[int, list[CategorySummary]]:
    """Category summaries for each product, ordered by category id."""
    grouped: dict[int, list[CategorySummary]] = {product_id: [] for product_id in product_ids}
    if not product_ids:
        return grouped

    statement = (
        select(ProductCategoryTable.product_id, CategoryTable.id, CategoryTable.name)
        .join(CategoryTable, col(CategoryTable.id) == col(ProductCategoryTable.category_id))
        .where(col(ProductCategoryTable.product_id).in_(product_ids))
        .order_by(col(ProductCategoryTable.product_id), col(CategoryTable.id))
    )
    for product_id, category_id, name in session.exec(statement):
        grouped[product_id].append(CategorySummary(id=category_id, name=name))
    return grouped


def to_product(row: ProductTable, categories: list[CategorySummary]) -> Product:
    product = Product.model_validate(row, from_attributes=True)
    product.categories = categories
    return product


def fetch_product_page(session: Session, plan: ProductQueryPlan) -> Page[Product]:
    """Run ``plan`` and return the requested page with the filtered total."""
    count_statement = apply_product_filters(
        select(func.count()).select_from(ProductTable), plan
    )
    total = session.exec(count_statement).one()

    order_column = col(getattr(ProductTable, plan.order_by))
    statement = (
        apply_product_filters(select(ProductTable), plan)
        .order_by(order_column)
        .offset(plan.offset)
        .limit(plan.limit)
    )
    rows = session.exec(statement).all()
    categories = load_categories(session, [row.id for row in rows])

    return Page[Product](
        items=[to_product(row, categories[row.id]) for row in rows],
        total=total,
        page=plan.window.page,
        page_size=plan.window.page_size,
    )


class ProductRepository:
    """Data-access layer for products.

    The repository holds a handle to the database service, never a live
    connection: each call opens and closes its own transaction.
    """

    def __init__(self, db: DbSessionService, timeout: float | None = None) -> None:
        self._db = db
        self._timeout = (
            timeout if timeout is not None else get_config().catalog.transaction_timeout_seconds
        )

    def create(self, request: ProductCreate | Mapping[str, Any]) -> Product:
        """Insert a product and its associations atomically.

        Raises:
            ValidationFailed: the request is malformed (nothing is opened).
            NotFoundError: any referenced category is missing.
            ConflictError: the SKU is already used by another product.
        """
        request = validate_product_create(request)

        with self._db.transaction(self._timeout) as session:
            categories = self._resolve_categories(session, request.category_ids)
            if request.sku is not None:
                self._ensure_sku_available(session, request.sku)

            row = ProductTable(**request.model_dump(exclude={"category_ids"}))
            session.add(row)
            session.flush()
            self._link(session, row.id, categories)
            product = to_product(row, categories)

        logger.info("Created product {} in categories {}", product.id, product.category_ids)
        return product

    def get(self, product_id: int) -> Product:
        with self._db.transaction(self._timeout) as session:
            row = self._get_row(session, product_id)
            return to_product(row, load_categories(session, [product_id])[product_id])

    def list(
        self,
        page: int | None = None,
        page_size: int | None = None,
        category_id: int | None = None,
        in_stock: bool | None = None,
    ) -> Page[Product]:
        """List products ordered by id, optionally by category and stock flag."""
        plan = build_product_query(
            page=page, page_size=page_size, category_id=category_id, in_stock=in_stock
        )
        with self._db.transaction(self._timeout) as session:
            return fetch_product_page(session, plan)

    def update(self, product_id: int, request: ProductUpdate | Mapping[str, Any]) -> Product:
        """Apply a partial update.

        When ``category_ids`` is present the association set is replaced as a
        whole, under the same all-or-nothing rule as ``create``.
        """
        request = validate_product_update(request)

        with self._db.transaction(self._timeout) as session:
            row = self._get_row(session, product_id)
            changes = request.changes()

            if changes.get("sku") is not None and changes["sku"] != row.sku:
                self._ensure_sku_available(session, changes["sku"], exclude_id=product_id)

            for field, value in changes.items():
                setattr(row, field, value)

            if request.replaces_categories:
                categories = self._resolve_categories(session, request.category_ids)
                self._unlink_all(session, product_id)
                self._link(session, product_id, categories)
            else:
                categories = load_categories(session, [product_id])[product_id]

            row.touch()
            session.add(row)
            session.flush()
            product = to_product(row, categories)

        logger.bind(fields=sorted(changes)).info(
            "Updated product {} (categories replaced: {})",
            product_id,
            request.replaces_categories,
        )
        return product

    def delete(self, product_id: int) -> None:
        """Delete a product together with its association rows."""
        with self._db.transaction(self._timeout) as session:
            row = self._get_row(session, product_id)
            self._unlink_all(session, product_id)
            session.delete(row)

        logger.info("Deleted product {}", product_id)

    def _get_row(self, session: Session, product_id: int) -> ProductTable:
        row = session.get(ProductTable, product_id)
        if row is None:
            raise NotFoundError("Product", product_id)
        return row

    def _resolve_categories(
        self, session: Session, category_ids: Sequence[int]
    ) -> list[CategorySummary]:
        """Batch existence check; raises for the first id that does not exist."""
        if not category_ids:
            return []

        statement = (
            select(CategoryTable.id, CategoryTable.name)
            .where(col(CategoryTable.id).in_(category_ids))
            .order_by(col(CategoryTable.id))
        )
        found = [CategorySummary(id=id_, name=name) for id_, name in session.exec(statement)]
        known = {category.id for category in found}
        missing = [category_id for category_id in category_ids if category_id not in known]
        if missing:
            raise NotFoundError("Category", missing[0])
        return found

    def _ensure_sku_available(
        self, session: Session, sku: str, exclude_id: int | None = None
    ) -> None:
        statement = select(ProductTable.id).where(col(ProductTable.sku) == sku)
        if exclude_id is not None:
            statement = statement.where(col(ProductTable.id) != exclude_id)
        if session.exec(statement).first() is not None:
            raise ConflictError(f"Product with SKU '{sku}' already exists", field="sku")

    def _link(
        self, session: Session, product_id: int, categories: Sequence[CategorySummary]
    ) -> None:
        session.add_all(
            ProductCategoryTable(product_id=product_id, category_id=category.id)
            for category in categories
        )
        session.flush()

    def _unlink_all(self, session: Session, product_id: int) -> None:
        links = session.exec(
            select(ProductCategoryTable).where(
                col(ProductCategoryTable.product_id) == product_id
            )
        ).all()
        for link in links:
            session.delete(link)
        session.flush()
