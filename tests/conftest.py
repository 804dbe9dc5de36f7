"""Pytest configuration and fixtures for the storefront service."""

import asyncio

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from storefront.config import settings
from storefront.errors import NotFoundError, PermissionDeniedError
from storefront.models.location import Coordinates, PostalAddress
from storefront.models.product import Product, Rating
from storefront.services.catalog.session_registry import (
    CatalogSessionRegistry,
    get_session_registry,
)
from storefront.services.clients.catalog_client import CatalogClient, get_catalog_client
from storefront.services.clients.identity_client import (
    RedisIdentityClient,
    RedisProfileStore,
    get_identity_client,
    get_profile_store,
)
from storefront.services.clients.location_client import (
    LocationService,
    get_location_factory,
)
from storefront.services.storage.favorites_store import (
    FavoritesStore,
    get_favorites_store,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


def make_product(
    product_id,
    title,
    category,
    *,
    description="",
    price=10.0,
) -> Product:
    return Product(
        id=str(product_id),
        title=title,
        description=description,
        category=category,
        price=price,
        image=f"https://example.com/{product_id}.jpg",
        rating=Rating(rate=4.1, count=120),
    )


class StubCatalogClient(CatalogClient):
    """In-memory catalog with switchable failures."""

    def __init__(self, products=(), categories=()):
        self.products = list(products)
        self.categories = list(categories)
        self.products_error: Exception | None = None
        self.categories_error: Exception | None = None
        self.product_error: Exception | None = None
        self.calls: list[str] = []

    async def fetch_all_products(self):
        self.calls.append("products")
        await asyncio.sleep(0)
        if self.products_error is not None:
            raise self.products_error
        return list(self.products)

    async def fetch_products_by_category(self, category):
        self.calls.append(f"category:{category}")
        await asyncio.sleep(0)
        return [p for p in self.products if p.category == category]

    async def fetch_categories(self):
        self.calls.append("categories")
        await asyncio.sleep(0)
        if self.categories_error is not None:
            raise self.categories_error
        return list(self.categories)

    async def fetch_product(self, product_id):
        self.calls.append(f"product:{product_id}")
        await asyncio.sleep(0)
        if self.product_error is not None:
            raise self.product_error
        for product in self.products:
            if product.id == product_id:
                return product
        raise NotFoundError(f"Product {product_id} not found")


class StubLocationService(LocationService):
    """Location service answering with a fixed address."""

    def __init__(self, fix, address="221B Baker Street, London"):
        self._fix = fix
        self._address = address

    def has_permission(self) -> bool:
        return self._fix is not None

    async def current_location(self) -> Coordinates:
        if self._fix is None:
            raise PermissionDeniedError("Location permission not granted")
        return self._fix

    async def reverse_geocode(self, coordinates: Coordinates) -> PostalAddress:
        await asyncio.sleep(0)
        return PostalAddress(lines=[self._address], locality="London")


@pytest.fixture
def sample_products():
    return [
        make_product(1, "Red Shirt", "clothing", description="Cotton tee", price=20.0),
        make_product(
            2, "Blue Mug", "home", description="Ceramic mug with a shirt print"
        ),
        make_product(3, "Green SHIRT", "clothing", description="Linen"),
        make_product(4, "Desk Lamp", "home", description="Warm light", price=35.5),
    ]


@pytest.fixture
def catalog(sample_products):
    return StubCatalogClient(sample_products, ["clothing", "home"])


@pytest.fixture(autouse=True)
def fast_checkout():
    """Skip the simulated order submission delay."""
    original = settings.ORDER_SUBMIT_DELAY_SECONDS
    settings.ORDER_SUBMIT_DELAY_SECONDS = 0
    yield
    settings.ORDER_SUBMIT_DELAY_SECONDS = original


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture
def favorites(redis_client):
    return FavoritesStore(redis_client, prefix="test:favorites:")


@pytest.fixture
def identity(redis_client):
    return RedisIdentityClient(redis_client)


@pytest.fixture
def profiles(redis_client):
    return RedisProfileStore(redis_client)


@pytest_asyncio.fixture()
async def client(redis_client, catalog, favorites, identity, profiles):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from storefront.main import app

    registry = CatalogSessionRegistry()
    app.dependency_overrides[get_catalog_client] = lambda: catalog
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[get_favorites_store] = lambda: favorites
    app.dependency_overrides[get_identity_client] = lambda: identity
    app.dependency_overrides[get_profile_store] = lambda: profiles
    app.dependency_overrides[get_location_factory] = lambda: StubLocationService

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        registry.close_all()
        app.dependency_overrides.clear()
