#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Hosts the stream relay: ``POST /api/chat`` and ``POST /api/explain`` turn
one upstream token stream into ``text/event-stream`` frames.

Author: System Architect
Date: 2026-03-02
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from spanlens.application.api.dependencies import build_stream_relay
from spanlens.application.api.middleware import ErrorHandlingMiddleware, RequestContextMiddleware
from spanlens.application.api.routes.chat import router as chat_router
from spanlens.application.api.routes.health import router as health_router
from spanlens.core.config.constants import ERROR_METHOD_NOT_ALLOWED, HEADER_THREAD_ID, Stage
from spanlens.core.config.settings import Settings, get_settings
from spanlens.core.exceptions import SpanlensError, ValidationError
from spanlens.core.logging.logger import get_logger, get_thread_id, setup_logging

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    A relay already placed on ``app.state`` (tests do this) is kept.
    """
    settings = get_settings()
    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting stream relay",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    try:
        if getattr(app.state, "stream_relay", None) is None:
            app.state.stream_relay = build_stream_relay(settings)
        logger.info(
            "Application startup complete", provider=app.state.stream_relay.provider.name
        )

        yield

    finally:
        logger.info("Application shutdown complete")


# ============================================================================
# Exception Handlers
# ============================================================================


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    headers = {}
    thread_id = get_thread_id()
    if thread_id:
        headers[HEADER_THREAD_ID] = thread_id
    return JSONResponse(
        status_code=status_code, content={"error": message, **extra}, headers=headers or None
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Missing or invalid fields: 400 with the endpoint's message, no stream."""
    logger.info(
        "Request rejected",
        stage=Stage.REQUEST_VALIDATION.value,
        path=request.url.path,
        error=exc.message,
        details=exc.details,
    )
    return _error_response(400, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Request rejected", stage=Stage.REQUEST_VALIDATION.value, path=request.url.path)
    return _error_response(400, "Invalid request")


async def spanlens_exception_handler(request: Request, exc: SpanlensError):
    logger.error(
        f"Relay exception: {exc.message}", error_type=type(exc).__name__, thread_id=exc.thread_id
    )
    return _error_response(500, exc.message, error_type=type(exc).__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTP errors keep their status; 405 carries the fixed message."""
    if exc.status_code == 405:
        message = ERROR_METHOD_NOT_ALLOWED
    else:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = _error_response(exc.status_code, message)
    for name, value in (exc.headers or {}).items():
        response.headers[name] = value
    return response


# ============================================================================
# Application Factory
# ============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Token stream relay for chat and span explanations",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Middleware executes in reverse order of registration: the error
    # handler wraps CORS, which wraps the request context.
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER_THREAD_ID],
    )
    app.add_middleware(
        ErrorHandlingMiddleware,
        include_traceback=(settings.app.ENVIRONMENT == "development"),
    )

    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SpanlensError, spanlens_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    base_path = settings.app.API_BASE_PATH
    app.include_router(health_router, prefix=base_path)
    app.include_router(chat_router, prefix=base_path)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{base_path}/health",
        }

    return app


# Create application instance
app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "spanlens.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
