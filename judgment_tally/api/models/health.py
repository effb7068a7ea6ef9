"""Health check response model."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus which judgment pipelines this process serves.

    A pipeline without a schema identifier still answers (with neutral
    tallies), so an unconfigured pipeline does not make the service
    unhealthy.
    """

    status: Literal["healthy"] = "healthy"
    version: str
    safety_rating_configured: bool = False
    comment_vote_configured: bool = False
    attestation_backend: Literal["http", "in_memory"] = Field(
        ..., description="Where attestations are read from and written to"
    )
