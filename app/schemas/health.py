"""Liveness and readiness bodies."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """GET /health: the process is up."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """GET /health/ready when the record store answered."""

    status: str = Field(default="ok", description="Readiness status")
    realtime: Literal["connected", "disabled"] = Field(
        default="disabled",
        description="Change channel state; when disabled, cache entries refresh on stale time only",
    )
    cached_queries: int = Field(default=0, description="Entries in the query cache")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the record store is unreachable (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason (e.g. record store unreachable)")
