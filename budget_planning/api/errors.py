"""
Exception handlers mapping domain and validation errors to HTTP 400.

Both kinds of error answer with a single human-readable message in
`{"error": ...}`. HTTPException (authentication, roles) keeps FastAPI's
default `{"detail": ...}` body.
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from budget_planning.services.exceptions import BudgetPlanningError

logger = logging.getLogger(__name__)


DEFAULT_VALIDATION_MESSAGE = "Invalid request"


def validation_message(error: Dict[str, Any]) -> str:
    """
    Extract the client-facing text from one pydantic error entry.

    Messages raised as ValueError inside validators are kept verbatim
    (pydantic otherwise prefixes them with "Value error, ").
    """
    ctx = error.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    return error.get("msg") or DEFAULT_VALIDATION_MESSAGE


async def budget_planning_error_handler(request: Request, exc: BudgetPlanningError) -> JSONResponse:
    logger.info(
        f"Request rejected: {exc.message}",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": exc.message},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = validation_message(errors[0]) if errors else DEFAULT_VALIDATION_MESSAGE

    logger.info(
        f"Validation failed: {message}",
        extra={
            "path": request.url.path,
            "error_count": len(errors),
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on `app`."""
    app.add_exception_handler(BudgetPlanningError, budget_planning_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
