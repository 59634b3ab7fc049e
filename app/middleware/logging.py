import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger("app.middleware")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every HTTP request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s - unhandled error", request.method, request.url.path)
            raise
        process_time = (time.perf_counter() - start_time) * 1000
        logger.info(
            "%s %s - %.2fms - %d",
            request.method,
            request.url.path,
            process_time,
            response.status_code,
        )
        return response
