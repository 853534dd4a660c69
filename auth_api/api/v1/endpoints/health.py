"""Liveness and dependency health endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from auth_api.config import settings
from auth_api.core.redis_client import check_redis_connection
from auth_api.database import check_database_connection
from auth_api.schemas.common import ApiResponse, CamelModel

router = APIRouter(prefix="/health", tags=["Health"])


class ServiceStatus(CamelModel):
    """Service identity and overall status."""

    status: str
    version: str
    environment: str


class DependencyStatus(ServiceStatus):
    """Status of the stores the auth flows depend on."""

    database: bool
    cache: bool


@router.get("", response_model=ApiResponse[ServiceStatus], summary="Liveness check")
async def health_check() -> ApiResponse[ServiceStatus]:
    """Report that the process is serving requests."""
    return ApiResponse(
        data=ServiceStatus(
            status="ok",
            version=settings.app_version,
            environment=settings.environment,
        )
    )


@router.get(
    "/ready",
    response_model=ApiResponse[DependencyStatus],
    summary="Readiness check",
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ApiResponse[DependencyStatus]}},
)
async def readiness_check() -> JSONResponse:
    """
    Check the database and Redis.

    The database is required; without it no credential or session can be
    read, so the service reports 503. Redis only backs the profile cache, so a
    Redis outage is reported as ``degraded`` with 200.
    """
    database_ok = await check_database_connection()
    cache_ok = await check_redis_connection()

    if not database_ok:
        state, code = "unavailable", status.HTTP_503_SERVICE_UNAVAILABLE
    elif not cache_ok:
        state, code = "degraded", status.HTTP_200_OK
    else:
        state, code = "ok", status.HTTP_200_OK

    body = ApiResponse(
        data=DependencyStatus(
            status=state,
            version=settings.app_version,
            environment=settings.environment,
            database=database_ok,
            cache=cache_ok,
        ),
        message=state,
        code=code,
    )
    return JSONResponse(status_code=code, content=body.model_dump(mode="json", by_alias=True))
