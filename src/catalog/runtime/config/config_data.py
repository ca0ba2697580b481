"""Typed sections of config.yaml.

Each top-level key under ``config:`` maps onto one model below; anything
left out falls back to the defaults declared here.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.engine import make_url


class LoggingConfig(BaseModel):
    """Loguru sinks."""

    level: str = Field(default="INFO", description="Minimum level for every sink")
    format: Literal["json", "plain"] = Field(default="plain", description="File sink format")
    file: str | None = Field(default=None, description="Rotating log file; stderr only when unset")
    max_size_mb: int = Field(default=10, ge=1, description="Rotate the file at this size")
    backup_count: int = Field(default=5, ge=0, description="Rotated files to keep")


class DatabaseConfig(BaseModel):
    """Engine URL, pool sizing and where the password comes from."""

    url: str = Field(
        default="sqlite:///./catalog.db",
        description="Database connection URL (sqlite or postgresql)",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"

    @property
    def password(self) -> str | None:
        """Password from ``password_file``, then ``password_env_var``, then the URL."""
        if self.password_file:
            try:
                return Path(self.password_file).read_text().strip()
            except OSError as e:
                raise ValueError(f"Cannot read database password file {self.password_file}") from e

        if self.password_env_var:
            secret = os.getenv(self.password_env_var)
            if not secret:
                raise ValueError(f"Environment variable {self.password_env_var} not set")
            return secret

        return make_url(self.url).password

    @property
    def connection_string(self) -> str:
        """``url`` with the resolved password filled in, unmasked."""
        url = make_url(self.url)
        if not self.is_sqlite:
            secret = self.password
            if secret and secret != url.password:
                if url.password:
                    logger.warning("Database URL password overridden by configured secret")
                url = url.set(password=secret)
        return url.render_as_string(hide_password=False)


class CatalogConfig(BaseModel):
    """Pagination and transaction limits for the catalog repositories."""

    default_page_size: int = Field(default=10, ge=1, description="Page size used when none is given")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound for page_size")
    transaction_timeout_seconds: float | None = Field(
        default=30.0,
        description="Deadline applied to each repository transaction (None disables it)",
    )

    @model_validator(mode="after")
    def _check_page_bounds(self) -> CatalogConfig:
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self


class AppConfig(BaseModel):
    """Where the HTTP service listens and which environment it runs in."""

    environment: Literal["development", "production", "test"] = "development"
    host: str = "localhost"
    port: int = Field(default=8000, ge=1, le=65535)


class ConfigData(BaseModel):
    """Root of the ``config:`` section."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    app: AppConfig = Field(default_factory=AppConfig)
