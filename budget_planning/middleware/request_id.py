"""
Request ID middleware for correlation tracking.

The ID is published three ways: on `request.state.request_id`, in the
`request_id_var` context variable read by the logging filter, and in the
X-Request-ID response header.
"""

import re
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from budget_planning.core.logging_config import request_id_var


REQUEST_ID_HEADER = "X-Request-ID"

# Token characters only, so a client cannot inject quotes or separators into log lines
_CLIENT_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def accepted_request_id(header_value: Optional[str]) -> str:
    """Return the client's ID if it is a short token, else a fresh UUID4."""
    if header_value and _CLIENT_REQUEST_ID.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation ID to every request and response.

    Example:
        app.add_middleware(RequestIDMiddleware)
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
