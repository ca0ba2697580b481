"""Shared utilities for CLI commands."""

from rich.console import Console

from src.catalog.core.services import DbSessionService

console = Console()

_db: DbSessionService | None = None


def get_db() -> DbSessionService:
    """Database service built from the active configuration, created once per process."""
    global _db
    if _db is None:
        _db = DbSessionService()
    return _db
