"""
Performance tracking middleware for request latency logging
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Voice turns chain transcription, completion and synthesis
SLOW_REQUEST_SECONDS = 5.0


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency of every request."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start_time
        elapsed_ms = round(elapsed * 1000, 2)

        logger.info(
            f"PERFORMANCE: method={request.method} path={request.url.path} "
            f"status={response.status_code} latency={elapsed_ms}ms "
            f"request_id={getattr(request.state, 'request_id', 'unknown')}"
        )
        response.headers["X-Process-Time"] = str(elapsed_ms)

        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"SLOW_REQUEST: method={request.method} path={request.url.path} latency={elapsed_ms}ms"
            )
        return response
