"""Tests for the HTTP catalog client."""

from __future__ import annotations

import httpx
import pytest

from storefront.errors import DecodeError, NetworkError, NotFoundError
from storefront.services.clients.catalog_client import HttpCatalogClient

PRODUCT_JSON = {
    "id": 1,
    "title": "Fjallraven - Foldsack No. 1 Backpack, Fits 15 Laptops",
    "price": 109.95,
    "description": "Your perfect pack for everyday use and walks in the forest.",
    "category": "men's clothing",
    "image": "https://fakestoreapi.com/img/81fPKd-2AYL._AC_SL1500_.jpg",
    "rating": {"rate": 3.9, "count": 120},
}


def _client(handler) -> HttpCatalogClient:
    return HttpCatalogClient(
        base_url="https://catalog.test/",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_all_products_decodes_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=[PRODUCT_JSON])

    products = await _client(handler).fetch_all_products()

    assert seen == ["/products"]
    assert len(products) == 1
    assert products[0].id == "1"
    assert products[0].rating.count == 120


@pytest.mark.asyncio
async def test_fetch_categories():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/products/categories"
        return httpx.Response(200, json=["electronics", "jewelery"])

    assert await _client(handler).fetch_categories() == ["electronics", "jewelery"]


@pytest.mark.asyncio
async def test_fetch_by_category_interpolates_path():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=[PRODUCT_JSON])

    products = await _client(handler).fetch_products_by_category("men's clothing")

    assert seen == ["/products/category/men's clothing"]
    assert products[0].category == "men's clothing"


@pytest.mark.asyncio
async def test_fetch_product_empty_body_is_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    with pytest.raises(NotFoundError):
        await _client(handler).fetch_product("999")


@pytest.mark.asyncio
async def test_fetch_product_404_is_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(NotFoundError):
        await _client(handler).fetch_product("999")


@pytest.mark.asyncio
async def test_server_error_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    with pytest.raises(NetworkError, match="503"):
        await _client(handler).fetch_all_products()


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        await _client(handler).fetch_categories()


@pytest.mark.asyncio
async def test_malformed_json_is_decode_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(DecodeError):
        await _client(handler).fetch_all_products()


@pytest.mark.asyncio
async def test_wrong_shape_is_decode_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": 1, "title": "missing fields"}])

    with pytest.raises(DecodeError):
        await _client(handler).fetch_all_products()
