"""Routes driving catalog browsing sessions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from storefront.models.catalog import (
    CatalogSessionResponse,
    CategoryRequest,
    SearchTextRequest,
)
from storefront.services.catalog.session_registry import SessionRegistryDependency
from storefront.services.catalog.view_state import CatalogViewStateMachine
from storefront.services.clients.catalog_client import CatalogDependency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog/sessions", tags=["catalog"])


def _response(
    session_id: str,
    machine: CatalogViewStateMachine,
) -> CatalogSessionResponse:
    return CatalogSessionResponse(
        session_id=session_id,
        criteria=machine.criteria,
        state=machine.state,
    )


def _lookup(registry, session_id: str) -> CatalogViewStateMachine:
    machine = registry.get(session_id)
    if machine is None:
        raise HTTPException(status_code=404, detail="Unknown catalog session")
    return machine


@router.post(
    "",
    response_model=CatalogSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a catalog browsing session and load the catalog",
)
async def open_session(
    registry: SessionRegistryDependency,
    client: CatalogDependency,
) -> CatalogSessionResponse:
    session_id, machine = registry.open(client)
    await machine.wait_until_settled()
    return _response(session_id, machine)


@router.get("/{session_id}", response_model=CatalogSessionResponse)
async def read_session(
    session_id: str,
    registry: SessionRegistryDependency,
) -> CatalogSessionResponse:
    return _response(session_id, _lookup(registry, session_id))


@router.put("/{session_id}/search", response_model=CatalogSessionResponse)
async def update_search(
    session_id: str,
    payload: SearchTextRequest,
    registry: SessionRegistryDependency,
) -> CatalogSessionResponse:
    machine = _lookup(registry, session_id)
    machine.update_search_text(payload.text)
    return _response(session_id, machine)


@router.put("/{session_id}/category", response_model=CatalogSessionResponse)
async def select_category(
    session_id: str,
    payload: CategoryRequest,
    registry: SessionRegistryDependency,
) -> CatalogSessionResponse:
    machine = _lookup(registry, session_id)
    machine.select_category(payload.category)
    return _response(session_id, machine)


@router.post("/{session_id}/retry", response_model=CatalogSessionResponse)
async def retry_session(
    session_id: str,
    registry: SessionRegistryDependency,
) -> CatalogSessionResponse:
    machine = _lookup(registry, session_id)
    await machine.refresh()
    return _response(session_id, machine)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    registry: SessionRegistryDependency,
) -> None:
    if not registry.close(session_id):
        raise HTTPException(status_code=404, detail="Unknown catalog session")
