"""Entity package: product/category association."""

from .table import ProductCategoryTable

__all__ = ["ProductCategoryTable"]
