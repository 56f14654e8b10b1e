"""
Request/response logging middleware.

Logs one line per request with method, path, status and elapsed time, and
tags every response with an X-Request-ID header.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP request handled by the application."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start_time = time.perf_counter()
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"

        logger.info(f"[{request_id}] --> {request.method} {path}")
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(f"[{request_id}] <-- {request.method} {path} failed after {elapsed_ms}ms: {e}", exc_info=True)
            raise

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(f"[{request_id}] <-- {request.method} {path} {response.status_code} ({elapsed_ms}ms)")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
