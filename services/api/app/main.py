"""FastAPI application entry point.

Reaction Stats API - monthly Slack like/dislike leaderboards.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.errors import (
    AlreadyExistsError,
    InvalidError,
    InvalidSignatureError,
    NotFoundError,
    StatsError,
)
from app.routes import api_router
from app.schemas import ErrorResponse
from app.services.slack import ReportDeliveryError
from app.settings import get_settings
from app.stores.postgres import init_db, close_db, ping_db
from app.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")

_STATUS_BY_ERROR: dict[type[StatsError], int] = {
    InvalidError: 400,
    InvalidSignatureError: 401,
    NotFoundError: 404,
    AlreadyExistsError: 409,
}


def _error_body(code: str, message: str, detail: dict | None = None) -> dict:
    return ErrorResponse.build(code, message, detail)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    try:
        await init_db()
        await ping_db()
        logger.info("Database connected")
    except Exception:
        logger.exception("Database init failed")

    # Redis only backs webhook de-dup; the API works without it.
    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed")

    yield

    # Shutdown
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Monthly Slack reaction leaderboards",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    @app.exception_handler(StatsError)
    async def stats_error_handler(request: Request, exc: StatsError) -> JSONResponse:
        """Map application errors to structured error responses."""
        status_code = 500
        for error_type, code in _STATUS_BY_ERROR.items():
            if isinstance(exc, error_type):
                status_code = code
                break
        if status_code == 500:
            logger.error(f"Unhandled application error on {request.url.path}: {exc.message}")
            return JSONResponse(
                status_code=500,
                content=_error_body(
                    "INTERNAL_ERROR",
                    exc.message if settings.debug else "Internal server error",
                ),
            )
        return JSONResponse(status_code=status_code, content=_error_body(exc.code, exc.message, exc.detail))

    @app.exception_handler(ReportDeliveryError)
    async def delivery_error_handler(request: Request, exc: ReportDeliveryError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content=_error_body(
                "REPORT_DELIVERY_FAILED",
                str(exc) if settings.debug else "Report delivery failed",
            ),
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "INTERNAL_ERROR",
                str(exc) if settings.debug else "Internal server error",
            ),
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
