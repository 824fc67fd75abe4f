"""
API Middleware

- RequestContextMiddleware: correlation id (X-Thread-ID) and request log line
- ErrorHandlingMiddleware: catch-all for unhandled exceptions

Middleware runs in reverse order of registration; the error handler is
registered last so it wraps everything else.
"""

from .error_handler import ErrorHandlingMiddleware
from .request_context import RequestContextMiddleware

__all__ = ["ErrorHandlingMiddleware", "RequestContextMiddleware"]
