"""Product detail screen: single product load plus favorite toggle."""

from __future__ import annotations

import logging

from storefront.errors import error_message
from storefront.models.product import FavoriteProduct, ProductDetailState
from storefront.services.clients.catalog_client import CatalogClient
from storefront.services.storage.favorites_store import FavoritesStore

logger = logging.getLogger(__name__)


class ProductDetailController:
    def __init__(
        self,
        product_id: str,
        client: CatalogClient,
        favorites: FavoritesStore,
    ) -> None:
        self.product_id = product_id
        self._client = client
        self._favorites = favorites
        self.state = ProductDetailState()
        self.failure: Exception | None = None

    async def load(self) -> ProductDetailState:
        self.state = self.state.model_copy(update={"is_loading": True})
        try:
            product = await self._client.fetch_product(self.product_id)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Failed to load product %s: %s", self.product_id, exc)
            self.failure = exc
            self.state = self.state.model_copy(
                update={"is_loading": False, "error": error_message(exc)}
            )
            return self.state

        self.failure = None
        self.state = ProductDetailState(product=product)
        return self.state

    async def retry(self) -> ProductDetailState:
        return await self.load()

    async def is_favorite(self) -> bool:
        return await self._favorites.is_favorite(self.product_id)

    async def toggle_favorite(self) -> bool:
        """Flip favorite membership and return the new value.

        Does nothing until the product has loaded.
        """

        product = self.state.product
        if product is None:
            return await self.is_favorite()

        if await self._favorites.is_favorite(product.id):
            await self._favorites.remove(product.id)
            return False

        await self._favorites.add(FavoriteProduct.from_product(product))
        return True
