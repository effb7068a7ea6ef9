"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Response

from judgment_tally.bootstrap.metrics import export_metrics

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get("/metrics", response_class=Response, summary="Prometheus metrics")
async def get_metrics() -> Response:
    """Tally pass, malformed record, submission and request duration metrics."""
    content, content_type = export_metrics()
    return Response(content=content, media_type=content_type)
