"""Health check endpoints: liveness, and readiness against the record store."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.core.constants import TABLE_TENANTS
from app.infrastructure.exceptions import RecordStoreError
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Record store unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 if the record store answers; 503 otherwise.

    Realtime is reported but never fails readiness: without the change
    channel, cache entries still refresh on their stale time.
    """
    state = request.app.state
    try:
        await state.record_store.select(TABLE_TENANTS, columns="id", limit=1)
    except RecordStoreError as e:
        logger.warning("Readiness check failed: %s", e.details)
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="Record store unreachable").model_dump(),
        )
    return ReadinessResponse(
        realtime="connected" if getattr(state, "invalidators", None) is not None else "disabled",
        cached_queries=len(state.query_cache),
    )
