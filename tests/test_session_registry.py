"""Tests for catalog session bookkeeping and idle eviction."""

from __future__ import annotations

import pytest

from storefront.services.catalog.session_registry import (
    CatalogSessionRegistry,
    get_session_registry,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.mark.asyncio
async def test_idle_session_is_closed_and_dropped(catalog, clock):
    registry = CatalogSessionRegistry(ttl=60, clock=clock)
    session_id, machine = registry.open(catalog)
    await machine.wait_until_settled()

    clock.now = 61

    assert registry.get(session_id) is None
    assert machine.closed
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_use_refreshes_idle_deadline(catalog, clock):
    registry = CatalogSessionRegistry(ttl=60, clock=clock)
    session_id, machine = registry.open(catalog)

    clock.now = 50
    assert registry.get(session_id) is machine
    clock.now = 100

    assert registry.get(session_id) is machine
    assert not machine.closed
    registry.close_all()


@pytest.mark.asyncio
async def test_open_evicts_abandoned_sessions(catalog, clock):
    registry = CatalogSessionRegistry(ttl=60, clock=clock)
    abandoned = [registry.open(catalog)[1] for _ in range(500)]

    clock.now = 120
    registry.open(catalog)

    assert len(registry) == 1
    assert all(machine.closed for machine in abandoned)
    registry.close_all()


@pytest.mark.asyncio
async def test_explicit_close_is_not_repeated(catalog, clock):
    registry = CatalogSessionRegistry(ttl=60, clock=clock)
    session_id, _ = registry.open(catalog)

    assert registry.close(session_id)
    assert not registry.close(session_id)
    assert registry.evict_idle() == 0


@pytest.mark.asyncio
async def test_expired_session_answers_404(client, clock):
    from storefront.main import app

    registry = CatalogSessionRegistry(ttl=60, clock=clock)
    app.dependency_overrides[get_session_registry] = lambda: registry

    opened = await client.post("/catalog/sessions")
    session_id = opened.json()["session_id"]
    assert (await client.get(f"/catalog/sessions/{session_id}")).status_code == 200

    clock.now = 61
    response = await client.get(f"/catalog/sessions/{session_id}")

    assert response.status_code == 404
    assert len(registry) == 0
