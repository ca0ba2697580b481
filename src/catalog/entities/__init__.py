"""Entities module with an entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model and request models
- table.py: Database persistence model
- repository.py: Data access layer (imported from its module directly)
"""

from .category import Category, CategoryTable
from .product import Product, ProductTable
from .product_category import ProductCategoryTable

__all__ = [
    "Category",
    "CategoryTable",
    "Product",
    "ProductTable",
    "ProductCategoryTable",
]
