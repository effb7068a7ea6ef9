"""Health endpoint."""

from fastapi import APIRouter

from judgment_tally import __version__
from judgment_tally.api.models.health import HealthResponse
from judgment_tally.bootstrap.tally import get_tally_config

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    config = get_tally_config()
    return HealthResponse(
        version=__version__,
        safety_rating_configured=config.safety_rating_schema_id is not None,
        comment_vote_configured=config.comment_vote_schema_id is not None,
        attestation_backend="http" if config.attestation_service_url else "in_memory",
    )
