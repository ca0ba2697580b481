"""Entity package: Product."""

from .entity import Product, ProductCreate, ProductUpdate
from .table import ProductTable

__all__ = ["Product", "ProductCreate", "ProductUpdate", "ProductTable"]
