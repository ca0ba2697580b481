"""FastAPI application for the catalog."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.responses import JSONResponse

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.errors import register_error_handlers
from src.catalog.api.http.routers import categories, health, products
from src.catalog.api.utils.app_startup import configure_logging
from src.catalog.core.services import DbManageService, DbSessionService
from src.catalog.runtime.context import get_config

configure_logging()

__all__ = ["app", "startup", "shutdown"]


def startup(app: FastAPI) -> None:
    """Build the database service, ensure the schema exists and publish it."""
    config = get_config()
    logger.info("Starting catalog in {} environment", config.app.environment)

    database_service = DbSessionService()
    DbManageService(database_service).create_all()
    app.state.app_dependencies = ApplicationDependencies(database_service=database_service)


def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down catalog")
    dependencies: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if dependencies is not None:
        dependencies.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup(app)
    try:
        yield
    finally:
        shutdown(app)


_show_docs = get_config().app.environment != "production"

app = FastAPI(
    title="Catalog API",
    lifespan=lifespan,
    docs_url="/docs" if _show_docs else None,
    redoc_url="/redoc" if _show_docs else None,
)
register_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag every log line of the request with its id and time the response."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    client_ip = request.client.host if request.client else "unknown"
    start = time.perf_counter()

    with logger.contextualize(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=client_ip,
    ):
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.bind(error_type=type(exc).__name__).exception("request.error")
            response = JSONResponse(
                status_code=500,
                content={"error": "InternalError", "message": "Internal Server Error"},
            )

        elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.bind(status_code=response.status_code, duration_ms=elapsed_ms).info(
            "{} {} -> {}", request.method, request.url.path, response.status_code
        )
        response.headers.setdefault("X-Request-ID", request_id)
        return response


app.include_router(health.router)
app.include_router(products.router)
app.include_router(categories.router)


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    # access logs come from log_requests
    uvicorn.run(app, host=config.app.host, port=config.app.port, access_log=False)
