"""Database engine, session factory and transaction coordinator."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from src.catalog.core.errors import (
    CatalogError,
    ConflictError,
    InternalError,
    TransactionTimeout,
)
from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import get_config


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES ... ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enforce_foreign_keys(engine: Engine) -> Engine:
    if engine.dialect.name == "sqlite" and not event.contains(
        engine, "connect", _enable_sqlite_foreign_keys
    ):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_engine(url: str, **engine_kwargs: Any) -> Engine:
    """Create an engine for ``url`` with foreign keys enforced on SQLite."""
    return enforce_foreign_keys(create_engine(url, **engine_kwargs))


def _is_unique_violation(error: IntegrityError) -> bool:
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(error.orig).lower()


def translate_storage_error(error: SQLAlchemyError) -> CatalogError:
    """Map a SQLAlchemy failure onto the catalog error taxonomy."""
    if isinstance(error, IntegrityError):
        if _is_unique_violation(error):
            return ConflictError(f"Unique constraint violated: {error.orig}")
        return InternalError(f"Integrity error: {error.orig}")
    return InternalError(f"Database error: {type(error).__name__}")


class DbSessionService:
    def __init__(self, engine: Engine | None = None, config: ConfigData | None = None):
        """Wrap ``engine``, or build one from configuration when none is given."""
        if engine is not None:
            self._engine = enforce_foreign_keys(engine)
            return

        main_config = config or get_config()
        db_config = main_config.database

        logger.info("Configuring database engine for environment: {}", main_config.app.environment)
        engine_kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "connect_args": self._get_connect_args(main_config),
        }

        url = make_url(db_config.connection_string)
        if db_config.is_sqlite and url.database in (None, "", ":memory:"):
            # A single shared connection keeps the in-memory database alive
            engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                    "pool_pre_ping": True,
                }
            )

        logger.info("Initializing database engine for backend {}", url.get_backend_name())
        self._engine = build_engine(db_config.connection_string, **engine_kwargs)

        logger.bind(pool=self.get_pool_status()).debug("Database engine ready")

    @property
    def engine(self) -> Engine:
        return self._engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if config.database.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,  # sessions hop between worker threads
                    "timeout": 20,  # lock timeout
                }
            )
            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )
        else:
            connect_args.update(
                {
                    "application_name": f"{config.app.environment}_catalog",
                    "connect_timeout": 30,
                }
            )

        return connect_args

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def transaction(self, timeout: float | None = None) -> Iterator[Session]:
        """Run the enclosed block as one all-or-nothing unit of work.

        Commits when the block exits normally and rolls back on any
        exception. With a ``timeout`` every SQL statement first checks the
        deadline and aborts with ``TransactionTimeout`` once it has passed;
        the deadline is checked again right before commit.
        """
        session = self.get_session()
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            connection = session.connection()
            if deadline is not None:
                self._arm_deadline(connection, deadline, timeout)
            yield session
            if deadline is not None and time.monotonic() >= deadline:
                raise TransactionTimeout(timeout)
            session.commit()
        except CatalogError as e:
            session.rollback()
            logger.bind(error_type=type(e).__name__).warning("Transaction rolled back: {}", e.message)
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.bind(error_type=type(e).__name__).error("Database transaction failed: {}", e)
            if deadline is not None and time.monotonic() >= deadline:
                # statement_timeout cancelled the statement server side
                raise TransactionTimeout(timeout) from e
            raise translate_storage_error(e) from e
        except Exception as e:
            session.rollback()
            logger.bind(error_type=type(e).__name__).exception("Database transaction failed")
            raise
        finally:
            session.close()

    def _arm_deadline(self, connection: Connection, deadline: float, timeout: float) -> None:
        if connection.dialect.name == "postgresql":
            remaining_ms = max(int((deadline - time.monotonic()) * 1000), 1)
            connection.exec_driver_sql(f"SET LOCAL statement_timeout = {remaining_ms}")

        def check_deadline(conn, cursor, statement, parameters, context, executemany):
            if time.monotonic() >= deadline:
                raise TransactionTimeout(timeout)

        # Bound to this Connection only; it is discarded when the session closes
        event.listen(connection, "before_cursor_execute", check_deadline)

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.bind(error_type=type(e).__name__).error("Database health check failed: {}", e)
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    def dispose(self) -> None:
        self._engine.dispose()
