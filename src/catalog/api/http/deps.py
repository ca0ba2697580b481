"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Depends, Request

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.core.services import DbSessionService
from src.catalog.entities.category.repository import CategoryRepository
from src.catalog.entities.product.repository import ProductRepository


def get_db_service(request: Request) -> DbSessionService:
    """Get the database service created at startup."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.database_service


def get_product_repository(db: DbSessionService = Depends(get_db_service)) -> ProductRepository:
    return ProductRepository(db)


def get_category_repository(db: DbSessionService = Depends(get_db_service)) -> CategoryRepository:
    return CategoryRepository(db)
