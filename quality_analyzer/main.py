# Data Quality Analyzer - FastAPI Main Application
# Application factory with middleware, lifecycle and error handling

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from quality_analyzer.core.config import get_settings
from quality_analyzer.core.exceptions import BaseApplicationException
from quality_analyzer.core.logging import (
    LogContext,
    clear_request_context,
    generate_request_id,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
        log_format=settings.log_format,
        recommendations="openai" if settings.openai.is_configured else "rule-based"
    )
    yield
    logger.info("Application shutdown complete")


# ============================================================================
# Middleware Classes
# ============================================================================

class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request context management.

    Adds request ID tracking, timing and logging context to all requests.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", generate_request_id())
        set_request_context(request_id=request_id)
        request.state.request_id = request_id

        start_time = datetime.utcnow()

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id

            duration_ms = (datetime.utcnow() - start_time).total_seconds() * 1000
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code}",
                context=LogContext(
                    request_id=request_id,
                    operation="http_request",
                    duration_ms=duration_ms
                ),
                status_code=response.status_code
            )
            return response

        except Exception:
            duration_ms = (datetime.utcnow() - start_time).total_seconds() * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                duration_ms=round(duration_ms, 2)
            )
            raise

        finally:
            clear_request_context()


# ============================================================================
# Exception Handlers
# ============================================================================

async def application_exception_handler(
    request: Request,
    exc: BaseApplicationException
) -> JSONResponse:
    """Handle application-specific exceptions."""
    logger.warning(
        f"Application error: {exc.message}",
        error_code=exc.error_code.value,
        error_id=str(exc.context.error_id)
    )

    return JSONResponse(
        status_code=exc.http_status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "error",
            "message": "Validation error",
            "errors": errors
        }
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        f"Unhandled exception: {str(exc)}",
        exc_info=True,
        request_id=request_id
    )

    message = "An internal error occurred" if get_settings().is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": message,
            "request_id": request_id
        }
    )


# ============================================================================
# Application Factory
# ============================================================================

def create_application() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application with all
    middleware, exception handlers and routers.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.app_version,
        description="Data quality scoring and cleanup recommendations for CSV and JSON datasets",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan
    )

    # Last added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(BaseApplicationException, application_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    from quality_analyzer.api.routes import api_router
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment.value,
            "timestamp": datetime.utcnow().isoformat()
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "quality_analyzer.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.is_development,
        log_level=_settings.log_level.value.lower()
    )
