"""
Access logging middleware.

Logs one line when a request completes (method, path, status code,
latency, request ID) and an error line with the traceback when the
handler raises. Must run inside RequestIDMiddleware so the request ID
is already on `request.state`.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from budget_planning.core.logging_config import get_logger, log_with_context


logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every HTTP request.

    4xx responses are logged at WARNING so rejected operations stand out
    from normal traffic; everything else below 500 is INFO.

    Example:
        app.add_middleware(LoggingMiddleware)
        app.add_middleware(RequestIDMiddleware)  # added last, runs first
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        method = request.method
        path = request.url.path
        request_id = getattr(request.state, "request_id", None)

        logger.debug(
            "Request started",
            extra={"method": method, "path": path, "request_id": request_id}
        )

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {exc}",
                extra={
                    "method": method,
                    "path": path,
                    "latency_ms": round(latency_ms, 2),
                    "request_id": request_id,
                    "exception_type": type(exc).__name__,
                },
                exc_info=True
            )
            raise

        latency_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code

        if status_code >= 500:
            level = "error"
        elif status_code >= 400:
            level = "warning"
        else:
            level = "info"

        log_with_context(
            logger,
            level,
            "Request completed",
            request_id=request_id,
            method=method,
            path=path,
            status_code=status_code,
            latency_ms=round(latency_ms, 2),
        )

        return response
