"""In-memory registry of live catalog browsing sessions."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from threading import RLock
from typing import Annotated

from fastapi import Depends

from storefront.config import settings
from storefront.services.catalog.view_state import CatalogViewStateMachine
from storefront.services.clients.catalog_client import CatalogClient

logger = logging.getLogger(__name__)


class CatalogSessionRegistry:
    """Holds one state machine per open browsing session.

    Sessions not touched for ``ttl`` seconds are closed and dropped on the next
    ``open`` or ``get``.
    """

    def __init__(
        self,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = RLock()
        self._ttl = settings.CATALOG_SESSION_TTL_SECONDS if ttl is None else ttl
        self._clock = clock
        self._sessions: dict[str, CatalogViewStateMachine] = {}
        self._last_used: dict[str, float] = {}

    def open(self, client: CatalogClient) -> tuple[str, CatalogViewStateMachine]:
        """Create a session; its first load starts immediately."""

        self.evict_idle()
        session_id = uuid.uuid4().hex
        machine = CatalogViewStateMachine(client)
        with self._lock:
            self._sessions[session_id] = machine
            self._last_used[session_id] = self._clock()

        logger.info("Opened catalog session %s", session_id)
        return session_id, machine

    def get(self, session_id: str) -> CatalogViewStateMachine | None:
        self.evict_idle()
        with self._lock:
            machine = self._sessions.get(session_id)
            if machine is not None:
                self._last_used[session_id] = self._clock()
            return machine

    def close(self, session_id: str) -> bool:
        with self._lock:
            machine = self._sessions.pop(session_id, None)
            self._last_used.pop(session_id, None)
        if machine is None:
            return False
        machine.close()
        logger.info("Closed catalog session %s", session_id)
        return True

    def evict_idle(self) -> int:
        """Close every session idle for longer than the TTL."""

        cutoff = self._clock() - self._ttl
        with self._lock:
            expired = [
                session_id
                for session_id, last_used in self._last_used.items()
                if last_used < cutoff
            ]
            machines = [self._sessions.pop(session_id) for session_id in expired]
            for session_id in expired:
                del self._last_used[session_id]

        for machine in machines:
            machine.close()
        if expired:
            logger.info("Evicted %d idle catalog sessions", len(expired))
        return len(expired)

    def close_all(self) -> None:
        with self._lock:
            machines = list(self._sessions.values())
            self._sessions.clear()
            self._last_used.clear()
        for machine in machines:
            machine.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


_registry = CatalogSessionRegistry()


def get_session_registry() -> CatalogSessionRegistry:
    """FastAPI dependency factory."""

    return _registry


SessionRegistryDependency = Annotated[
    CatalogSessionRegistry, Depends(get_session_registry)
]
