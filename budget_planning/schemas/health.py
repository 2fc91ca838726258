"""
Response models for the liveness and readiness endpoints.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """The process is up and serving requests."""
    status: Literal["ok"]
    timestamp: datetime = Field(description="Current UTC time")


class DatabaseStatus(BaseModel):
    """
    Result of the readiness query against the configured database.

    Attributes:
        dialect: SQLAlchemy dialect of DATABASE_URL ("sqlite", "postgresql")
        reachable: Whether `SELECT 1` answered before the timeout
        latency_ms: Time spent waiting for the answer
        error: Short reason when unreachable
    """
    dialect: str
    reachable: bool
    latency_ms: float
    error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ReadinessResponse(BaseModel):
    """
    Readiness of the service, which depends on its database only.

    Example:
        {
            "status": "ready",
            "database": {"dialect": "sqlite", "reachable": true, "latency_ms": 0.41, "error": null},
            "timestamp": "2024-05-19T09:01:06.123456"
        }
    """
    status: Literal["ready", "not_ready"]
    database: DatabaseStatus
    timestamp: datetime = Field(description="Current UTC time")
