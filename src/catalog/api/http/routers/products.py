"""Product API router with CRUD operations."""

from fastapi import APIRouter, Depends, Response, status

from src.catalog.api.http.deps import get_product_repository
from src.catalog.core.query import Page
from src.catalog.entities.product import Product, ProductCreate, ProductUpdate
from src.catalog.entities.product.repository import ProductRepository

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    repository: ProductRepository = Depends(get_product_repository),
) -> Product:
    """Create a product attached to one or more existing categories."""
    return repository.create(payload)


@router.get("", response_model=Page[Product])
def list_products(
    page: int | None = None,
    page_size: int | None = None,
    category_id: int | None = None,
    in_stock: bool | None = None,
    repository: ProductRepository = Depends(get_product_repository),
) -> Page[Product]:
    """List products, optionally filtered by category and stock flag."""
    return repository.list(
        page=page, page_size=page_size, category_id=category_id, in_stock=in_stock
    )


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository),
) -> Product:
    return repository.get(product_id)


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    repository: ProductRepository = Depends(get_product_repository),
) -> Product:
    """Apply the fields present in the body; ``category_ids`` replaces the set."""
    return repository.update(product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository),
) -> Response:
    repository.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
