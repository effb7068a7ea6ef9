"""FastAPI application entry point for judgment-tally.

Serve with any ASGI server, e.g. ``uvicorn judgment_tally.api.main:app``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from judgment_tally import __version__
from judgment_tally.api.middleware.request_context import RequestContextMiddleware
from judgment_tally.api.routes.comment_votes import router as comment_votes_router
from judgment_tally.api.routes.health import router as health_router
from judgment_tally.api.routes.metrics import router as metrics_router
from judgment_tally.api.routes.site_ratings import router as site_ratings_router
from judgment_tally.bootstrap.logging import configure_logging
from judgment_tally.bootstrap.tally import get_tally_config, shutdown_tally_dependencies


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(get_tally_config())
    yield
    await shutdown_tally_dependencies()


def create_app() -> FastAPI:
    """Build the API application."""
    application = FastAPI(
        title="Judgment Tally API",
        description="Site safety ratings and comment votes from signed attestations",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(RequestContextMiddleware)
    for router in (health_router, metrics_router, site_ratings_router, comment_votes_router):
        application.include_router(router)
    return application


app = create_app()
