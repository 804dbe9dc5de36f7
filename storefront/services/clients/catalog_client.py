"""Catalog client abstractions and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Annotated, Any

import httpx
from fastapi import Depends
from pydantic import TypeAdapter, ValidationError

from storefront.config import settings
from storefront.errors import DecodeError, NetworkError, NotFoundError
from storefront.models.product import Product

logger = logging.getLogger(__name__)

_PRODUCT = TypeAdapter(Product)
_PRODUCT_LIST = TypeAdapter(list[Product])
_CATEGORY_LIST = TypeAdapter(list[str])


class CatalogClient(ABC):
    """Read-only interface to the product catalog."""

    @abstractmethod
    async def fetch_all_products(self) -> Sequence[Product]:
        """Return every product in server order."""

    @abstractmethod
    async def fetch_products_by_category(self, category: str) -> Sequence[Product]:
        """Return the products of a single category."""

    @abstractmethod
    async def fetch_categories(self) -> Sequence[str]:
        """Return the category list."""

    @abstractmethod
    async def fetch_product(self, product_id: str) -> Product:
        """Return one product or raise ``NotFoundError``."""


class HttpCatalogClient(CatalogClient):
    """Catalog implementation backed by the public REST catalog API."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Catalog base URL must be provided")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def fetch_all_products(self) -> list[Product]:
        data = await self._get_json("products")
        return self._decode(_PRODUCT_LIST, data, "products")

    async def fetch_products_by_category(self, category: str) -> list[Product]:
        data = await self._get_json(f"products/category/{category}")
        return self._decode(_PRODUCT_LIST, data, "products")

    async def fetch_categories(self) -> list[str]:
        data = await self._get_json("products/categories")
        return self._decode(_CATEGORY_LIST, data, "categories")

    async def fetch_product(self, product_id: str) -> Product:
        data = await self._get_json(f"products/{product_id}")
        # Unknown ids come back as an empty 200 response
        if data is None:
            raise NotFoundError(f"Product {product_id} not found")
        return self._decode(_PRODUCT, data, "product")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> Any:
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Unable to reach catalog: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"Catalog resource {path} not found")
        if response.is_error:
            raise NetworkError(
                f"Catalog request {path} failed with status {response.status_code}"
            )

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Catalog returned malformed JSON for {path}") from exc

    @staticmethod
    def _decode(adapter: TypeAdapter, data: Any, what: str) -> Any:
        if data is None:
            raise DecodeError(f"Catalog returned an empty {what} payload")
        try:
            return adapter.validate_python(data)
        except ValidationError as exc:
            logger.warning("Failed to decode catalog %s: %s", what, exc)
            raise DecodeError(f"Catalog returned invalid {what}") from exc


_catalog_client: CatalogClient | None = None


def _initialize_catalog_client() -> CatalogClient:
    return HttpCatalogClient(
        base_url=settings.CATALOG_BASE_URL,
        timeout=settings.CATALOG_TIMEOUT_SECONDS,
    )


def get_catalog_client() -> CatalogClient:
    """FastAPI dependency returning the process-wide catalog client."""

    global _catalog_client
    if _catalog_client is None:
        _catalog_client = _initialize_catalog_client()
    return _catalog_client


CatalogDependency = Annotated[CatalogClient, Depends(get_catalog_client)]


async def close_catalog_client() -> None:
    """Release the process-wide HTTP connection pool, if one was opened."""

    global _catalog_client
    client, _catalog_client = _catalog_client, None
    if isinstance(client, HttpCatalogClient):
        await client.aclose()
