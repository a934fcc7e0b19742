"""
Appraisal API - FastAPI application factory.

Startup is strictly ordered: connect (bounded retry) → schema bootstrap →
serve. Either of the first two failing aborts startup, and uvicorn exits
non-zero.

Run with:
    uvicorn appraisal_api.main:create_app --factory
or the `appraisal-api` console script.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from appraisal_api.core.config import Config, get_settings
from appraisal_api.core.context import AppContext
from appraisal_api.core.exceptions import AppException, StartupError
from appraisal_api.core.logging import setup_logging
from appraisal_api.core.middleware import OriginAllowListMiddleware
from appraisal_api.core.schema import initialize_database
from appraisal_api.database import connect_with_retry
from appraisal_api.routers.api_router import api_router

logger = logging.getLogger(__name__)


# ============================================================================
# LIFESPAN MANAGEMENT
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - Startup: establish connectivity, then make sure the schema exists
    - Shutdown: release pooled connections
    """
    context: AppContext = app.state.context
    settings = context.settings
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")

    # The retry loop sleeps between attempts; keep it off the event loop
    result = await run_in_threadpool(
        connect_with_retry,
        context.engine,
        settings.db_connect_attempts,
        settings.db_connect_delay,
    )
    if not result.ok:
        logger.critical(f"✗ Database unreachable after {result.attempts} attempts: {result.error}")
        raise StartupError(f"Database unreachable after {result.attempts} attempts")

    try:
        await run_in_threadpool(initialize_database, context.engine)
        logger.info("✓ Database schema ready")
    except Exception as e:
        logger.critical(f"✗ Database initialization failed: {e}")
        raise StartupError("Database initialization failed") from e

    yield  # Application runs here

    logger.info("Gracefully shutting down...")
    context.close()


# ============================================================================
# EXCEPTION HANDLERS
# Every failure body carries at least an "error" field.
# ============================================================================
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Unparseable bodies are client errors, reported as 400."""
    errors = []
    for error in exc.errors():
        # loc is usually ('body', 'fieldName')
        field = error["loc"][-1] if len(error["loc"]) > 0 else "unknown"
        errors.append({
            "field": str(field),
            "msg": error["msg"]
        })

    logger.warning(f"Validation Error: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body", "details": errors}
    )


async def app_exception_handler(request: Request, exc: AppException):
    """Handle domain-specific application exceptions."""
    content = {"error": exc.message}
    if exc.details:
        content.update(exc.details)
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
    """Handle standard HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail if isinstance(exc.detail, str) else "Request failed"},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Fallback handler for unhandled server errors."""
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"}
    )


# ============================================================================
# FACTORY
# ============================================================================
def create_app(settings: Optional[Config] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the application and its service context.

    Args:
        settings: Configuration; read from the environment when omitted.
        context: Prebuilt context (tests pass one bound to their own engine).
    """
    if context is None:
        context = AppContext.from_settings(settings or get_settings())
    settings = context.settings

    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Employee appraisal records",
        lifespan=lifespan,
    )
    app.state.context = context

    # Last added runs first: CORS answers preflights, then the allow-list
    # turns away any other request from an unknown origin.
    app.add_middleware(OriginAllowListMiddleware, allowed_origins=settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app
