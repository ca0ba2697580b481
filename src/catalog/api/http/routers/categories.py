"""Category API router with CRUD operations and the category's product listing."""

from fastapi import APIRouter, Depends, Response, status

from src.catalog.api.http.deps import get_category_repository
from src.catalog.core.query import Page
from src.catalog.entities.category import Category, CategoryCreate, CategoryUpdate
from src.catalog.entities.category.repository import CategoryRepository
from src.catalog.entities.product import Product

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    repository: CategoryRepository = Depends(get_category_repository),
) -> Category:
    return repository.create(payload)


@router.get("", response_model=list[Category])
def list_categories(
    include_product_count: bool = False,
    repository: CategoryRepository = Depends(get_category_repository),
) -> list[Category]:
    """List categories by name, with live product counts when requested."""
    return repository.list(include_product_count=include_product_count)


@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: int,
    repository: CategoryRepository = Depends(get_category_repository),
) -> Category:
    return repository.get(category_id)


@router.put("/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    repository: CategoryRepository = Depends(get_category_repository),
) -> Category:
    return repository.update(category_id, payload)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    repository: CategoryRepository = Depends(get_category_repository),
) -> Response:
    """Delete the category; its products stay, minus this association."""
    repository.delete(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{category_id}/products", response_model=Page[Product])
def list_category_products(
    category_id: int,
    page: int | None = None,
    page_size: int | None = None,
    repository: CategoryRepository = Depends(get_category_repository),
) -> Page[Product]:
    return repository.list_products(category_id, page=page, page_size=page_size)
