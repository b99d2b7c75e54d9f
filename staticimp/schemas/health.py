"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /v1/health (liveness)."""

    status: str = Field(default="ok", description="Service status")
    version: str = Field(default="", description="Service version")
