"""Routes for product details and favorites."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from storefront.api.errors import catalog_http_error
from storefront.models.product import (
    FavoriteProduct,
    FavoriteToggleResponse,
    ProductDetailResponse,
)
from storefront.services.clients.catalog_client import CatalogDependency
from storefront.services.controllers.product_detail import ProductDetailController
from storefront.services.storage.favorites_store import FavoritesDependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.get(
    "/products/{product_id}",
    response_model=ProductDetailResponse,
    summary="Load a product together with its favorite flag",
)
async def read_product(
    product_id: str,
    client: CatalogDependency,
    favorites: FavoritesDependency,
) -> ProductDetailResponse:
    controller = ProductDetailController(product_id, client, favorites)
    state = await controller.load()
    if state.product is None:
        raise catalog_http_error(controller.failure, "Product not found")
    return ProductDetailResponse(
        state=state,
        is_favorite=await controller.is_favorite(),
    )


@router.post(
    "/products/{product_id}/favorite",
    response_model=FavoriteToggleResponse,
    summary="Toggle favorite membership of a product",
)
async def toggle_favorite(
    product_id: str,
    client: CatalogDependency,
    favorites: FavoritesDependency,
) -> FavoriteToggleResponse:
    controller = ProductDetailController(product_id, client, favorites)
    state = await controller.load()
    if state.product is None:
        raise catalog_http_error(controller.failure, "Product not found")
    return FavoriteToggleResponse(
        product_id=product_id,
        is_favorite=await controller.toggle_favorite(),
    )


@router.get(
    "/favorites",
    response_model=list[FavoriteProduct],
    summary="List favorite products, most recent first",
)
async def list_favorites(favorites: FavoritesDependency) -> list[FavoriteProduct]:
    return await favorites.list_favorites()
