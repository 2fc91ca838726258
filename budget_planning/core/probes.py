"""
Database readiness probe.

The database is the only thing the service needs besides itself, so
readiness is one timed `SELECT 1` through the shared session factory.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from budget_planning.core.database import async_session_maker, engine

logger = logging.getLogger(__name__)


DEFAULT_PROBE_TIMEOUT_SECONDS = 2.0
CONNECTION_FAILED_ERROR = "Connection failed"


@dataclass(frozen=True)
class DatabaseProbe:
    dialect: str
    reachable: bool
    latency_ms: float
    error: Optional[str] = None


async def probe_database(timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS) -> DatabaseProbe:
    """
    Run `SELECT 1` and report how the database answered.

    Never raises: timeouts and driver errors are logged and turned into
    an unreachable result.

    Args:
        timeout_seconds: Maximum time to wait for the answer

    Returns:
        DatabaseProbe with the dialect of the configured engine
    """
    error = None
    started = time.perf_counter()

    try:
        async with asyncio.timeout(timeout_seconds):
            async with async_session_maker() as session:
                await session.execute(text("SELECT 1"))

    except TimeoutError:
        error = f"No answer within {timeout_seconds:g}s"
        logger.warning("Database probe timed out", extra={"timeout_seconds": timeout_seconds})
    except (SQLAlchemyError, OSError) as exc:
        error = CONNECTION_FAILED_ERROR
        logger.warning(f"Database probe failed: {exc}", extra={"exception_type": type(exc).__name__})

    return DatabaseProbe(
        dialect=engine.dialect.name,
        reachable=error is None,
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        error=error,
    )
