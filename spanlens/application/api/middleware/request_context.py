"""
Request Context Middleware

Gives every request a correlation id and logs its outcome.

- The id comes from ``X-Thread-ID`` when the client sends one, otherwise a
  fresh UUID. It is stored on ``request.state.thread_id``, bound to the
  logging context and echoed back in the response header.
- One log line per request with method, path, status and duration. For a
  stream the duration covers the time to the response headers only.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from spanlens.core.config.constants import HEADER_THREAD_ID
from spanlens.core.logging.logger import clear_thread_id, get_logger, set_thread_id

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        thread_id = request.headers.get(HEADER_THREAD_ID) or str(uuid.uuid4())
        request.state.thread_id = thread_id
        set_thread_id(thread_id)

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        try:
            response = await call_next(request)
            response.headers[HEADER_THREAD_ID] = thread_id
            logger.info(
                f"Request completed: {method} {path}",
                method=method,
                path=path,
                status_code=response.status_code,
                duration_seconds=round(time.perf_counter() - start_time, 4),
            )
            return response
        finally:
            clear_thread_id()
