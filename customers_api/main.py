"""
FastAPI application for the Customers API service.

Provides a REST API for creating, listing, reading, updating and deleting
customer records stored in a single SQLite table, plus liveness and
readiness probes.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from customers_api.config import Settings, get_settings
from customers_api.observability.health import (
    LivenessResponse,
    ReadinessResponse,
    get_health_checker,
)
from customers_api.observability.logging import configure_logging, get_logger
from customers_api.observability.logging_middleware import (
    SlowRequestLogger,
    StructuredLoggingMiddleware,
)
from customers_api.routers import customers_router
from customers_api.storage.database import (
    CustomerDatabase,
    CustomerNotFoundError,
    CustomerStorageError,
)

settings = get_settings()
configure_logging(
    log_level=settings.logging.level,
    json_output=settings.logging.json_output,
    colorized=settings.logging.colorized,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the shared storage handle and creates the customers table. Any
    failure here aborts startup, so the server never runs without a schema.
    """
    app_settings: Settings = app.state.settings

    logger.info("=== Customers API Starting ===")

    customer_db = CustomerDatabase(db_path=app_settings.storage.customer_db_path)
    try:
        await customer_db.initialize()
    except CustomerStorageError as e:
        logger.critical("Startup failed: customer table unavailable", error=str(e))
        await customer_db.close()
        raise

    app.state.customer_db = customer_db
    logger.info("=== Service Ready ===", db_path=app_settings.storage.customer_db_path)

    try:
        yield
    finally:
        logger.info("=== Shutting down ===")
        app.state.customer_db = None
        await customer_db.close()
        logger.info("=== Shutdown complete ===")


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed or wrongly typed request body -> 400."""
    error = _format_validation_errors(exc)
    logger.warning(
        "Malformed request body",
        path=request.url.path,
        method=request.method,
        error=error,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Malformed request body", "error": error},
    )


async def customer_not_found_handler(request: Request, exc: CustomerNotFoundError):
    """
    Missing customer.

    Reported as a server error unless API_NOT_FOUND_AS_404 is enabled.
    """
    if request.app.state.settings.api.not_found_as_404:
        logger.info("Customer not found", path=request.url.path, customer_id=exc.customer_id)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Customer not found", "error": str(exc)},
        )

    logger.error(
        "Customer storage error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Customer storage error", "error": str(exc)},
    )


async def customer_storage_error_handler(request: Request, exc: CustomerStorageError):
    """Statement or connection failure -> 500 with the underlying error text."""
    logger.error(
        "Customer storage error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Customer storage error", "error": str(exc)},
    )


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Configuration to use (defaults to the global settings)
    """
    app_settings = app_settings or get_settings()

    app = FastAPI(
        title="Customers API",
        description="CRUD service for customer records",
        version=app_settings.logging.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.customer_db = None

    # Handlers resolving get_settings() see the same configuration as the app
    app.dependency_overrides[get_settings] = lambda: app_settings

    # Processed in reverse order of registration: request context is set first
    app.add_middleware(
        SlowRequestLogger,
        warning_threshold_ms=app_settings.logging.slow_request_warning_ms,
        error_threshold_ms=app_settings.logging.slow_request_error_ms,
    )
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(CustomerNotFoundError, customer_not_found_handler)
    app.add_exception_handler(CustomerStorageError, customer_storage_error_handler)

    app.include_router(customers_router)

    @app.get(
        "/health/liveness",
        response_model=LivenessResponse,
        tags=["Health"],
        summary="Liveness probe",
    )
    async def liveness_probe():
        return await get_health_checker().check_liveness()

    @app.get(
        "/health/readiness",
        response_model=ReadinessResponse,
        tags=["Health"],
        summary="Readiness probe",
        responses={
            200: {"description": "Service is ready"},
            503: {"description": "Service is not ready"},
        },
    )
    async def readiness_probe(request: Request, response: Response):
        """
        Readiness probe.

        Checks that the customer table can be queried through the shared
        storage handle.
        """
        readiness = await get_health_checker().check_readiness(
            customer_db=request.app.state.customer_db
        )
        if not readiness.ready:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

        logger.debug("Readiness probe completed", ready=readiness.ready)
        return readiness

    return app


app = create_app(settings)


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "customers_api.main:app",
        host=settings.service.host,
        port=settings.service.port,
        reload=settings.service.reload,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
