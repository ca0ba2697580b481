"""Error taxonomy shared by validation, repositories and the HTTP layer."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FieldViolation(BaseModel):
    """A single field-level validation failure."""

    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="Human readable reason")


class CatalogError(Exception):
    """Base class for every error surfaced by the catalog core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class ValidationFailed(CatalogError):
    """Malformed or out-of-range input. Raised before any storage access."""

    def __init__(self, violations: list[FieldViolation]) -> None:
        fields = ", ".join(v.field for v in violations) or "request"
        super().__init__(f"Invalid value for: {fields}")
        self.violations = violations

    @classmethod
    def single(cls, field: str, message: str) -> ValidationFailed:
        return cls([FieldViolation(field=field, message=message)])

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["violations"] = [v.model_dump() for v in self.violations]
        return payload


class NotFoundError(CatalogError):
    """A referenced product or category does not exist."""

    def __init__(self, resource: str, resource_id: int) -> None:
        super().__init__(f"{resource} with ID {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(CatalogError):
    """A unique constraint would be violated (product sku, category name)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InternalError(CatalogError):
    """Storage or transport failure, or an unclassified constraint violation."""


class TransactionTimeout(InternalError):
    """The transaction deadline passed before it could commit."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Transaction exceeded its {timeout:g}s deadline")
        self.timeout = timeout
