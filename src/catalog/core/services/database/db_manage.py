"""Schema management for the catalog tables."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from src.catalog.core.services.database.db_session import DbSessionService


class DbManageService:
    def __init__(self, db: DbSessionService | None = None):
        self._db = db or DbSessionService()

    @property
    def engine(self) -> Engine:
        return self._db.engine

    def create_all(self) -> None:
        """Create the categories, products and product_categories tables."""
        # Import models to register them with the metadata
        from src.catalog.entities import (  # noqa: F401
            CategoryTable,
            ProductCategoryTable,
            ProductTable,
        )

        SQLModel.metadata.create_all(self.engine)
        logger.info("Database initialized with tables: {}", sorted(SQLModel.metadata.tables))

    def drop_all(self) -> None:
        """Drop every catalog table, association table first."""
        from src.catalog.entities import (  # noqa: F401
            CategoryTable,
            ProductCategoryTable,
            ProductTable,
        )

        SQLModel.metadata.drop_all(self.engine)
        logger.warning("Dropped all catalog tables")
