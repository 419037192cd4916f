"""
FastAPI application initialization and configuration.
"""
import logging
from fastapi import FastAPI

from .middleware import log_requests_middleware
from .endpoints import (
    health_router,
    codex_auth_router,
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the web application hosting the Codex login routes"""
    application = FastAPI(title="Codex OAuth Bridge", version="1.0.0")

    application.middleware("http")(log_requests_middleware)

    application.include_router(health_router)
    application.include_router(codex_auth_router)

    logger.debug("FastAPI application initialized with all routers and middleware")
    return application


app = create_app()
