"""
QR History Backend - Access Log Middleware
============================================

What:  One console line per API request of the process server.
How:   Times the rest of the stack and logs method, path, status and duration
       on the `qrhistory.access` logger.

Only paths under API_PREFIX are logged, and the health path is skipped (the
frontend polls it). Static files and CORS preflights stay quiet. Request
bodies are never logged, since they carry the submitted QR text.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from qrhistory.config import settings

logger = logging.getLogger("qrhistory.access")


def access_log_level(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        prefix = settings.api_prefix
        logged = (
            request.method != "OPTIONS"
            and (not prefix or path == prefix or path.startswith(prefix + "/"))
            and path != f"{prefix}/health"
        )
        if not logged:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            access_log_level(response.status_code),
            "%s %s -> %d (%.1fms)",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
        )
        return response
