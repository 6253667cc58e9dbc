"""
FastAPI application entry point for the Data Quality Tracker API.

This module wires the service together: it configures logging, builds the
store handle and identity client in the lifespan, installs middleware (CORS,
security headers, per-IP rate limiting), registers exception handlers that
render the JSON envelope, mounts the API routers under /api, and serves the
root and health endpoints.

Envelope convention for every JSON response:
    { "success": bool, "data"?: ..., "message"?: str, "errors"?: [str], "pagination"?: {...} }
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dq_tracker import __version__
from dq_tracker.api import api_router
from dq_tracker.core.config import Settings, get_settings
from dq_tracker.core.database import Database
from dq_tracker.core.dependencies import DatabaseDep, SettingsDep
from dq_tracker.core.errors import ApiError, Unavailable, format_validation_errors
from dq_tracker.core.identity import IdentityClient
from dq_tracker.middleware import RateLimitMiddleware, SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Data Quality Tracker API"


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Create the store handle and identity client on startup; close them on shutdown.

    A failed database connection at startup is logged but does not stop the
    service: /health reports it, and the pool is retried lazily on first use.
    """
    settings = get_settings()
    logger.info(f"{SERVICE_NAME} starting (environment={settings.environment})")

    database = Database.from_settings(settings)
    identity = IdentityClient.from_settings(settings)
    app.state.database = database
    app.state.identity = identity

    try:
        await database.connect()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
    else:
        if not await database.check_connection():
            logger.error("Database connection failed")

    yield

    logger.info(f"{SERVICE_NAME} shutting down")
    try:
        await database.close()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")
    await identity.close()


# =============================================================================
# Exception Handlers
# =============================================================================


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = format_validation_errors(exc.errors())
    logger.warning(f"Invalid request on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request", "errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown paths and unsupported methods both read as "no such route"
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"success": False, "message": "Route not found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


# =============================================================================
# Application Factory
# =============================================================================


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to configure middleware with; defaults to get_settings().
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=SERVICE_NAME,
        version=__version__,
        description=(
            "REST API for logging, categorizing and monitoring data quality "
            "issues, with dashboard statistics and CSV export."
        ),
        lifespan=lifespan,
    )

    # Middleware (last added = outermost)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root(settings: SettingsDep) -> dict:
        """Service banner."""
        return {
            "success": True,
            "message": SERVICE_NAME,
            "version": settings.app_version,
            "environment": settings.environment,
        }

    @app.get("/health")
    @app.get("/api/health")
    async def health_check(db: DatabaseDep) -> dict:
        """
        Database-backed health probe for monitoring and load balancers.

        Returns:
            200 { success: true, database: "connected", timestamp }

        Raises:
            Unavailable 503: The probe query failed; the body reports
                database "disconnected".
        """
        timestamp = datetime.now(timezone.utc).isoformat()
        if not await db.check_connection():
            raise Unavailable(
                "Database unavailable",
                details={"database": "disconnected", "timestamp": timestamp},
            )
        return {"success": True, "database": "connected", "timestamp": timestamp}

    return app


app = create_app()


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dq_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().environment == "development",
    )
