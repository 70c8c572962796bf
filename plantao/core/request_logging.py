# plantao/core/request_logging.py
"""
Request logging middleware for tracking all HTTP requests.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from plantao.core.logging_config import get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs all HTTP requests with timing and status codes.

    Adds a request ID to each request for tracing; an incoming X-Request-ID
    header is reused.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        try:
            response = await call_next(request)
            status_code = response.status_code
            error = None
        except Exception as e:
            status_code = 500
            error = str(e)
            raise
        finally:
            duration_ms = (time.time() - start_time) * 1000

            log_data = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration": duration_ms,
            }
            tenant_id = request.path_params.get("tenant_id")
            if tenant_id:
                log_data["tenant_id"] = tenant_id

            extra = {"extra_fields": log_data}
            summary = f"{request.method} {request.url.path} - {status_code} ({duration_ms:.2f}ms)"

            if error:
                logger.error(f"{summary} - ERROR: {error}", extra=extra, exc_info=True)
            elif status_code >= 500:
                logger.error(summary, extra=extra)
            elif status_code >= 400:
                logger.warning(summary, extra=extra)
            elif request.url.path == "/health":
                # Health checks only at DEBUG (reduces noise)
                logger.debug(summary, extra=extra)
            else:
                logger.info(summary, extra=extra)

        response.headers["X-Request-ID"] = request_id

        return response
