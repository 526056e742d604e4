"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, TimeoutError as SQLAlchemyTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from emailbuilder.api.config import Settings, get_settings
from emailbuilder.api.middleware import LoggingMiddleware, SecurityConfig, SecurityHeadersMiddleware
from emailbuilder.api.routes import api_router
from emailbuilder.assets import BlobStore, LocalBlobStore, S3BlobStore
from emailbuilder.db.base import Database
from emailbuilder.errors import EmailBuilderError, Unavailable

logger = logging.getLogger("emailbuilder.api")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the configured image storage backend."""
    if settings.uses_s3:
        return S3BlobStore(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint_url,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            public_base_url=settings.s3_public_base_url,
            timeout_seconds=settings.blob_timeout_seconds,
        )
    return LocalBlobStore(settings.blob_local_dir, base_url=settings.blob_public_base_url)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")

    app.state.database.init()

    yield

    logger.info("Shutting down...")
    app.state.database.dispose()


def _error_response(status_code: int, message: str, detail=None) -> JSONResponse:
    body = {"message": message}
    if detail is not None:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to a ``{"message", "detail"}`` body."""

    @app.exception_handler(EmailBuilderError)
    async def handle_app_error(request: Request, exc: EmailBuilderError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        detail = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _error_response(400, "Invalid input", detail)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(OperationalError)
    @app.exception_handler(SQLAlchemyTimeoutError)
    async def handle_store_error(request: Request, exc: Exception):
        logger.error(f"Database failure on {request.method} {request.url.path}: {exc.__class__.__name__}")
        return JSONResponse(status_code=Unavailable.status_code, content=Unavailable().to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(500, "Internal server error")


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    blob_store: BlobStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Defaults to environment settings.
        database: Store handle; built from ``settings.database_url`` if omitted.
        blob_store: Image storage; built from settings if omitted.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Drag-and-drop email template builder API",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database or Database(
        settings.database_url,
        timeout_seconds=settings.db_timeout_seconds,
        echo=settings.sql_echo,
    )
    app.state.blob_store = blob_store or build_blob_store(settings)

    # Security headers middleware
    app.add_middleware(
        SecurityHeadersMiddleware,
        config=SecurityConfig(enable_hsts=settings.cookie_secure),
    )

    # Logging middleware
    app.add_middleware(
        LoggingMiddleware,
        exclude_paths=["/health", "/ready"],
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        create_app(_settings),
        host=_settings.host,
        port=_settings.port,
    )
