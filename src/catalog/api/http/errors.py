"""Translate catalog errors into HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse

from src.catalog.core.errors import (
    CatalogError,
    ConflictError,
    FieldViolation,
    NotFoundError,
    TransactionTimeout,
    ValidationFailed,
)

STATUS_BY_ERROR: list[tuple[type[CatalogError], int]] = [
    (ValidationFailed, 422),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (TransactionTimeout, status.HTTP_504_GATEWAY_TIMEOUT),
]


def status_for(error: CatalogError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = status_for(exc)
    body = exc.to_dict()
    if status_code >= 500:
        logger.bind(status_code=status_code, error_type=type(exc).__name__).error(
            "Catalog operation failed: {}", exc.message
        )
        # Storage details stay in the logs
        body["message"] = "Internal Server Error"
    return JSONResponse(status_code=status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    violations = []
    for item in exc.errors():
        loc = [str(part) for part in item["loc"] if part not in ("body", "query", "path")]
        violations.append(
            FieldViolation(
                field=".".join(loc) or "request",
                message=str(item["msg"]).removeprefix("Value error, "),
            )
        )
    return await catalog_error_handler(request, ValidationFailed(violations))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
