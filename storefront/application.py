"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.routes import include_api_routes
from storefront.config import settings
from storefront.services.catalog.session_registry import get_session_registry
from storefront.services.clients.catalog_client import close_catalog_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""

    logger.info("Catalog API at %s", settings.CATALOG_BASE_URL)
    yield

    # Drop open browsing sessions so no fetch writes into a disposed screen
    get_session_registry().close_all()
    try:
        await close_catalog_client()
    except Exception:
        logger.exception("Failed closing catalog client")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Storefront",
        description="Product browsing, favorites, checkout and profile backend",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
