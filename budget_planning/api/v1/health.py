"""
Liveness and readiness endpoints for process supervisors and load balancers.
"""

from fastapi import APIRouter, Response, status

from budget_planning.core.probes import probe_database
from budget_planning.models.base import utc_now
from budget_planning.schemas.health import DatabaseStatus, HealthResponse, ReadinessResponse


router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    """Always 200 while the process serves requests; touches nothing else."""
    return HealthResponse(status="ok", timestamp=utc_now())


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """
    200 when the database answers `SELECT 1`, 503 otherwise.

    The body names the database dialect so a misconfigured DATABASE_URL
    shows up without reading the logs.
    """
    probe = await probe_database()

    if not probe.reachable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if probe.reachable else "not_ready",
        database=DatabaseStatus.model_validate(probe),
        timestamp=utc_now(),
    )
