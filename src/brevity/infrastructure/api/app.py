"""FastAPI application for the account API.

``create_app`` wires the auth routes, the profile image file mount, the
health checks, the error envelope and the request logging middleware.
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from brevity.core.config import get_settings
from brevity.core.exceptions import BrevityError, InternalError, ValidationError
from brevity.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from brevity.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Prepare storage and the database on startup; release the engine on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting Brevity",
        version=settings.app_version,
        environment=settings.environment,
    )

    Path(settings.storage_path).mkdir(parents=True, exist_ok=True)
    try:
        await init_database()
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise

    yield

    await close_database()
    logger.info("Brevity stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Account lifecycle and authentication API",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)
    return app


def service_info(**fields: Any) -> dict[str, Any]:
    return {"service": "Brevity", "version": get_settings().app_version, **fields}


def register_health_check(app: FastAPI) -> None:
    """Liveness (``/health``) and readiness (``/ready``) endpoints."""

    @app.get("/health", tags=["health"])
    async def health_check():
        return service_info(status="healthy")

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Ready only while the account store answers."""
        if await get_db_manager().check_connection():
            return service_info(status="ready", database="connected")
        return JSONResponse(
            status_code=503,
            content=service_info(status="not_ready", database="disconnected"),
        )


def register_routes(app: FastAPI) -> None:
    from brevity.infrastructure.api.routes import auth_router

    settings = get_settings()

    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
    # Stored profile images are served from here
    app.mount(
        "/files",
        StaticFiles(directory=settings.storage_path, check_dir=False),
        name="files",
    )

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def error_content(exc: BrevityError) -> dict[str, Any]:
    """Build the failure envelope for an application error."""
    content: dict[str, Any] = {
        "success": False,
        "message": exc.message,
        "error": exc.code,
    }
    if isinstance(exc, ValidationError) and exc.details:
        content["details"] = exc.details
    content.update(exc.extra)
    return content


def register_exception_handlers(app: FastAPI) -> None:
    """Map every error to the ``{success, message, error}`` envelope."""

    @app.exception_handler(BrevityError)
    async def brevity_error_handler(request: Request, exc: BrevityError):
        return JSONResponse(status_code=exc.status_code, content=error_content(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
                "code": error["type"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_content(ValidationError(details=details)),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
            exc_type=type(exc).__name__,
            error=str(exc),
        )
        message = str(exc) if get_settings().debug else "An unexpected error occurred"
        return JSONResponse(status_code=500, content=error_content(InternalError(message)))


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Tag the request with a correlation ID and log its outcome and duration."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()
        bind_correlation_id(correlation_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()
