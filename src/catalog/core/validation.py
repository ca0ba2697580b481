"""Request validation.

Every function here is pure: it turns a raw payload into a normalized
request model or raises ``ValidationFailed`` listing each offending field.
Nothing in this module touches storage.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from src.catalog.core.errors import FieldViolation, ValidationFailed
from src.catalog.entities.category.entity import CategoryCreate, CategoryUpdate
from src.catalog.entities.product.entity import ProductCreate, ProductUpdate

RequestT = TypeVar("RequestT", bound=BaseModel)


def violations_from(error: ValidationError) -> list[FieldViolation]:
    """Flatten a pydantic error into field-level violations."""
    violations = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "request"
        message = item["msg"].removeprefix("Value error, ")
        violations.append(FieldViolation(field=field, message=message))
    return violations


def validate_request(model: type[RequestT], payload: Mapping[str, Any] | RequestT) -> RequestT:
    """Validate ``payload`` against ``model``.

    Already-built models are re-validated from their explicitly set fields so
    the omitted/present distinction survives.
    """
    if isinstance(payload, model):
        payload = payload.model_dump(exclude_unset=True)
    if not isinstance(payload, Mapping):
        raise ValidationFailed.single("request", "Expected an object")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as e:
        raise ValidationFailed(violations_from(e)) from e


def validate_product_create(payload: Mapping[str, Any] | ProductCreate) -> ProductCreate:
    return validate_request(ProductCreate, payload)


def validate_product_update(payload: Mapping[str, Any] | ProductUpdate) -> ProductUpdate:
    return validate_request(ProductUpdate, payload)


def validate_category_create(payload: Mapping[str, Any] | CategoryCreate) -> CategoryCreate:
    return validate_request(CategoryCreate, payload)


def validate_category_update(payload: Mapping[str, Any] | CategoryUpdate) -> CategoryUpdate:
    return validate_request(CategoryUpdate, payload)
