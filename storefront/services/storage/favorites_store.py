"""Redis-backed persistence for favorite products."""

from __future__ import annotations

import logging
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from storefront.config import settings
from storefront.models.product import FavoriteProduct
from storefront.services.storage.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class FavoritesStore:
    """Keyed favorites storage ordered by the time each product was added.

    Rows live in a hash keyed by product id; a sorted set scored by the
    favorite timestamp keeps the recency order.
    """

    def __init__(self, client: redis.Redis, prefix: str | None = None):
        self._client = client
        prefix = prefix if prefix is not None else settings.FAVORITES_KEY_PREFIX
        self._items_key = f"{prefix}items"
        self._order_key = f"{prefix}order"

    async def add(self, favorite: FavoriteProduct) -> None:
        """Insert or replace the favorite row for ``favorite.id``."""

        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(self._items_key, favorite.id, favorite.model_dump_json())
            pipe.zadd(self._order_key, {favorite.id: favorite.timestamp})
            await pipe.execute()
        logger.info("Added product %s to favorites", favorite.id)

    async def remove(self, product_id: str) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hdel(self._items_key, product_id)
            pipe.zrem(self._order_key, product_id)
            await pipe.execute()
        logger.info("Removed product %s from favorites", product_id)

    async def is_favorite(self, product_id: str) -> bool:
        return bool(await self._client.hexists(self._items_key, product_id))

    async def list_favorites(self) -> list[FavoriteProduct]:
        """Return every favorite, most recently added first."""

        ids = await self._client.zrevrange(self._order_key, 0, -1)
        if not ids:
            return []
        rows = await self._client.hmget(self._items_key, ids)
        return [FavoriteProduct.model_validate_json(row) for row in rows if row]


def get_favorites_store() -> FavoritesStore:
    """FastAPI dependency factory."""

    return FavoritesStore(get_redis_client())


FavoritesDependency = Annotated[FavoritesStore, Depends(get_favorites_store)]
