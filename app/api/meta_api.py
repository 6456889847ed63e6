"""Meta API endpoints (health, database check)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import UnitOfWork, get_uow
from app.api.openapi_responses import RATE_LIMITED, ErrorExample, error_responses
from app.api.schemas import DataResponse, DatabaseTimeResponse, HealthResponse
from app.core.errors import http_error_from_domain
from app.core.rate_limit import HEALTH_RATE_LIMIT, limit, rate_limit_ip_key
from app.services.meta_service import DatabaseUnavailableError

router = APIRouter(tags=["meta"])


@router.get(
    "/health",
    summary="Health check",
    response_model=HealthResponse,
    responses=error_responses(RATE_LIMITED),
)
@limit(HEALTH_RATE_LIMIT, key_func=rate_limit_ip_key)
def health(request: Request) -> HealthResponse:
    """Check the health of the application."""
    return HealthResponse(status="ok")


@router.get(
    "/test-db",
    summary="Database check",
    description="Round-trip to the database and report its clock.",
    response_model=DataResponse[DatabaseTimeResponse],
    responses=error_responses(
        ErrorExample(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="database_unavailable",
            message="Database connection failed",
            description="Database unreachable",
        ),
        RATE_LIMITED,
    ),
)
@limit(HEALTH_RATE_LIMIT, key_func=rate_limit_ip_key)
async def test_db(
    request: Request, uow: UnitOfWork = Depends(get_uow)
) -> DataResponse[DatabaseTimeResponse]:
    try:
        timestamp = await uow.meta_service.database_time()
    except DatabaseUnavailableError as e:
        raise http_error_from_domain(status.HTTP_500_INTERNAL_SERVER_ERROR, e) from e
    return DataResponse(
        message="Database connection successful",
        data=DatabaseTimeResponse(timestamp=timestamp),
    )
