"""
Error Handling Middleware - Educational Documentation
=====================================================

WHAT IS CENTRALIZED ERROR HANDLING?
-----------------------------------
Known errors are rendered by the application's exception handlers:

    ValidationError       -> 400 {"error": "<message>"}
    other SpanlensError   -> 500 {"error": "<message>", ...}
    HTTPException         -> its status, {"error": "<detail>"}

This middleware is the catch-all behind them. Anything that escapes a route
or another middleware is logged with its traceback and answered with a
500 JSON body instead of a bare connection reset.

Errors raised while a stream is already being sent never reach this point:
the relay turns upstream failures into an error frame itself.
"""

import traceback
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from spanlens.core.logging.logger import get_logger

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence for unhandled exceptions.

    Args:
        app: The ASGI application
        include_traceback: Include stack traces in the response body
            (development only)
    """

    def __init__(self, app, include_traceback: bool = False):
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            error_response = {
                "error": "An unexpected error occurred while processing your request",
                "error_type": error_type,
            }
            if self.include_traceback:
                error_response["traceback"] = traceback.format_exc()
                error_response["detail"] = str(e)

            return JSONResponse(status_code=500, content=error_response)
