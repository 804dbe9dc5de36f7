"""State machine behind the catalog browsing screen.

One machine lives for one browsing session. It owns the catalog snapshot, the
filter criteria and the load/error lifecycle::

    idle -> loading -> ready | error
    ready | error --retry--> loading

Filter changes never leave ``ready``; they only recompute the visible
products. While loading or after an error the criteria are recorded and applied
once data arrives.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from storefront.errors import error_message
from storefront.models.catalog import (
    CatalogViewState,
    ErrorState,
    FilterCriteria,
    IdleState,
    LoadingState,
    ReadyState,
)
from storefront.models.product import Product
from storefront.services.catalog.filtering import filter_products
from storefront.services.clients.catalog_client import CatalogClient

logger = logging.getLogger(__name__)


async def fan_out(*calls: Callable[[], Awaitable[Any]]) -> tuple[Any, ...]:
    """Run ``calls`` concurrently and return their results in call order.

    The first failure is raised as soon as it happens; siblings still running
    at that point are cancelled.
    """

    tasks = [asyncio.ensure_future(call()) for call in calls]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        failures = [
            task.exception()
            for task in tasks
            if task.done() and not task.cancelled() and task.exception() is not None
        ]
        if failures:
            raise failures[0]
        return tuple(task.result() for task in tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()


class CatalogViewStateMachine:
    """Product browsing state for one session.

    Not safe to drive from several tasks at once: the owner serializes calls to
    ``retry``, ``update_search_text`` and ``select_category``. Construction with
    ``autostart`` needs a running event loop because it starts the first load.
    """

    def __init__(self, client: CatalogClient, *, autostart: bool = True) -> None:
        self._client = client
        self._state: CatalogViewState = IdleState()
        self._snapshot: tuple[Product, ...] = ()
        self._categories: tuple[str, ...] = ()
        self._search_text = ""
        self._selected_category: str | None = None
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._closed = False

        if autostart:
            self.retry()

    @property
    def state(self) -> CatalogViewState:
        return self._state

    @property
    def snapshot(self) -> tuple[Product, ...]:
        return self._snapshot

    @property
    def criteria(self) -> FilterCriteria:
        return FilterCriteria(
            search_text=self._search_text,
            selected_category=self._selected_category,
        )

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def selected_category(self) -> str | None:
        return self._selected_category

    @property
    def closed(self) -> bool:
        return self._closed

    def retry(self) -> asyncio.Task[None]:
        """Enter ``loading`` and start fetching categories and products.

        A retry supersedes any fetch still in flight: the older task is
        cancelled and its result, should it still complete, is ignored.
        """

        if self._closed:
            raise RuntimeError("Catalog session is closed")

        self._generation += 1
        generation = self._generation
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self._state = LoadingState()
        self._task = asyncio.get_running_loop().create_task(self._load(generation))
        logger.debug("Catalog load %s started", generation)
        return self._task

    async def refresh(self) -> CatalogViewState:
        """Retry and wait for that load to settle."""

        task = self.retry()
        await asyncio.wait({task})
        return self._state

    async def wait_until_settled(self) -> CatalogViewState:
        """Wait for the fetch in flight, if any, and return the state."""

        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self._state

    def update_search_text(self, text: str) -> None:
        self._search_text = text
        self._recompute()

    def select_category(self, category: str | None) -> None:
        self._selected_category = category
        self._recompute()

    def close(self) -> None:
        """End the session; in-flight results are dropped."""

        self._closed = True
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug("Catalog session closed")

    async def _load(self, generation: int) -> None:
        try:
            categories, products = await fan_out(
                self._client.fetch_categories,
                self._client.fetch_all_products,
            )
        except asyncio.CancelledError:
            logger.debug("Catalog load %s cancelled", generation)
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if not self._is_current(generation):
                logger.debug("Discarding stale catalog failure %s", generation)
                return
            self._state = ErrorState(message=error_message(exc))
            logger.warning("Catalog load failed: %s", exc)
            return

        if not self._is_current(generation):
            logger.debug("Discarding stale catalog result %s", generation)
            return

        self._apply(categories, products)

    def _apply(self, categories: Sequence[str], products: Sequence[Product]) -> None:
        self._snapshot = tuple(products)
        self._categories = tuple(categories)
        self._state = self._ready_state()
        logger.info(
            "Catalog ready",
            extra={
                "products": len(self._snapshot),
                "categories": len(self._categories),
            },
        )

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _recompute(self) -> None:
        if isinstance(self._state, ReadyState):
            self._state = self._ready_state()
            logger.debug(
                "Recomputed visible products (%d of %d)",
                len(self._state.visible_products),
                len(self._snapshot),
            )

    def _ready_state(self) -> ReadyState:
        return ReadyState(
            categories=self._categories,
            visible_products=filter_products(
                self._snapshot,
                self._search_text,
                self._selected_category,
            ),
            selected_category=self._selected_category,
        )
