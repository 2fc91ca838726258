"""
Budget Planning - FastAPI Application Entry Point

Family budget service: users with admin, parent and child roles share
bank accounts, move money in and out within per-user usage limits, and
review the last month of operations.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from budget_planning.api.errors import register_exception_handlers
from budget_planning.api.v1 import accounts, auth, health, users
from budget_planning.core.config import settings
from budget_planning.core.database import init_db, close_db
from budget_planning.core.logging_config import get_logger, setup_logging
from budget_planning.middleware.request_id import RequestIDMiddleware
from budget_planning.middleware.logging import LoggingMiddleware
from budget_planning.middleware.security_headers import SecurityHeadersMiddleware
from budget_planning.middleware.rate_limit import RateLimitMiddleware


VERSION = "0.1.0"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup configures logging and creates missing tables (when
    ENABLE_DB_CREATE_ALL is set). Shutdown disposes the engine.
    """
    setup_logging(level=settings.log_level, json_format=settings.log_json)

    await init_db()
    logger.info("Application started", extra={"version": VERSION})

    yield

    await close_db()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.project_name,
    version=VERSION,
    description="Shared family bank accounts with role-based usage limits",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)


# Middleware runs in reverse order of registration
# (last registered = first executed)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    RateLimitMiddleware,
    auth_limit=settings.auth_rate_limit,
    default_limit=settings.default_rate_limit,
    enabled=settings.rate_limit_enabled,
)

# Needs request_id, so registered before RequestIDMiddleware
app.add_middleware(LoggingMiddleware)

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health.router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_v1_prefix}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{settings.api_v1_prefix}/user", tags=["users"])
app.include_router(accounts.router, prefix=f"{settings.api_v1_prefix}/account", tags=["accounts"])


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns basic API information.
    """
    return {
        "message": "Budget Planning API",
        "version": VERSION,
        "docs": "/docs",
    }
