"""System-level routes such as health checks."""

from __future__ import annotations

import httpx
from fastapi import APIRouter

from storefront.config import settings
from storefront.services.storage.redis_client import get_redis_client

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Smoke-test endpoint."""

    return {"message": "Storefront API"}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check with Redis and catalog connectivity."""

    try:
        await get_redis_client().ping()
        redis_status = "connected"
    except Exception:
        redis_status = "disconnected"

    try:
        async with httpx.AsyncClient(base_url=settings.CATALOG_BASE_URL) as client:
            response = await client.get("products/categories", timeout=5.0)
            catalog_status = (
                "connected" if response.status_code == 200 else "disconnected"
            )
    except Exception:
        catalog_status = "disconnected"

    return {
        "status": "healthy",
        "redis": redis_status,
        "catalog": catalog_status,
        "environment": settings.ENVIRONMENT,
    }
