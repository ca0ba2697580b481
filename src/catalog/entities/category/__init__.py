"""Entity package: Category."""

from .entity import Category, CategoryCreate, CategorySummary, CategoryUpdate
from .table import CategoryTable

__all__ = ["Category", "CategoryCreate", "CategorySummary", "CategoryUpdate", "CategoryTable"]
