"""Juridiko Chat API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, and lifecycle management for the member chat endpoint.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, Settings, get_config_summary, settings
from app.core.logging import configure_logging, request_id_var
from app.database import engine
from models import Base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    logger.info(f"Starting {settings.app_name} {settings.version}")

    # Development mode: auto-create tables if they don't exist
    # Otherwise: use Alembic migrations (alembic upgrade head)
    if settings.is_development:
        logger.info("Development mode: creating/updating database tables")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        logger.info("Database schema is managed by 'alembic upgrade head'")

    yield

    logger.info("Shutting down, closing database connections")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Member-gated legal assistant chat backed by Memberstack and Google Gemini",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""

    # Fixed CORS headers on every response, errors and preflight included
    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(settings.cors_headers)
        return response

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


def error_response(request: Request, status_code: int, message: str, error_code: str, details=None):
    content = {
        "error": message,
        "error_code": error_code,
        "request_id": getattr(request.state, "request_id", None),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return error_response(request, exc.status_code, message, error_code, details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            errors.append(
                {
                    "loc": list(error.get("loc", [])),
                    "msg": str(error.get("msg", "Validation error")),
                    "type": error.get("type", "value_error"),
                }
            )

        return error_response(request, 400, "Invalid request", "BAD_REQUEST", errors)

    # Runs outside the HTTP middlewares, so the CORS headers are added here
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
        response = error_response(request, 500, str(exc) or "Internal server error", "INTERNAL_ERROR")
        response.headers.update(settings.cors_headers)
        return response


def setup_routers(app: FastAPI):
    """Configure application routers."""
    from app.core.dependencies import get_settings
    from app.domains.chat.controller import router as chat_router

    @app.get("/health")
    async def health_check(config: Settings = Depends(get_settings)):
        """Database connectivity, required configuration and feature summary."""
        db_status = "healthy"
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning(f"Health check database connection failed: {str(e)}")
            db_status = "unhealthy"

        config_errors = []
        try:
            ConfigValidator.validate_required_settings(config)
        except ValueError as e:
            logger.warning(str(e))
            config_errors.append(str(e))

        summary = get_config_summary(config)
        return {
            "status": "healthy" if db_status == "healthy" and not config_errors else "degraded",
            "version": config.version,
            "environment": config.environment,
            "timestamp": datetime.now(UTC).isoformat(),
            "services": {
                "database": db_status,
                "membership": "configured" if summary["features"]["membership_configured"] else "not_configured",
                "ai_service": "configured" if summary["features"]["ai_enabled"] else "not_configured",
            },
            "configuration_errors": config_errors,
        }

    app.include_router(chat_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
