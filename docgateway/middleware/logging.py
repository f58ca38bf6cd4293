# ABOUTME: Logging middleware for request/response tracking
# ABOUTME: Emits one structured log line per request with status, timing, and tenant

import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("docgateway.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log request/response metrics.

    This middleware captures:
    - Method and path
    - Response status code and time in milliseconds
    - The organization resolved from the API key (set by verify_api_key)

    Headers are never logged, so API key material stays out of the logs.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        logger.info(
            "%s %s %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "organization_id": getattr(request.state, "organization_id", None),
            },
        )

        return response
