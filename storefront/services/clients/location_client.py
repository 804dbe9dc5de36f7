"""Location lookup used to pre-fill delivery and profile addresses."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Annotated

import httpx
from fastapi import Depends

from storefront.config import settings
from storefront.errors import NetworkError, NotFoundError, PermissionDeniedError
from storefront.models.location import Coordinates, PostalAddress

logger = logging.getLogger(__name__)

_LOCALITY_KEYS = ("city", "town", "village", "hamlet")


class LocationService(ABC):
    """Abstract device-location collaborator."""

    @abstractmethod
    def has_permission(self) -> bool:
        """Return True when the user granted location access."""

    @abstractmethod
    async def current_location(self) -> Coordinates:
        """Return a one-shot location fix."""

    @abstractmethod
    async def reverse_geocode(self, coordinates: Coordinates) -> PostalAddress:
        """Resolve coordinates to a postal address."""

    def format_address(self, address: PostalAddress) -> str:
        return address.lines[0] if address.lines else ""

    async def lookup_address(self) -> str:
        """Permission check, fix, reverse geocode and format in one go."""

        if not self.has_permission():
            raise PermissionDeniedError("Location permission not granted")
        coordinates = await self.current_location()
        address = await self.reverse_geocode(coordinates)
        return self.format_address(address)


class DeviceLocationService(LocationService):
    """Uses the fix reported by the device and a Nominatim-style geocoder.

    A missing fix means the device did not grant location access.
    """

    def __init__(
        self,
        fix: Coordinates | None,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._fix = fix
        self._base_url = base_url or settings.GEOCODER_BASE_URL
        self._user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self._transport = transport

    def has_permission(self) -> bool:
        return self._fix is not None

    async def current_location(self) -> Coordinates:
        if self._fix is None:
            raise PermissionDeniedError("Location permission not granted")
        return self._fix

    async def reverse_geocode(self, coordinates: Coordinates) -> PostalAddress:
        params = {
            "format": "jsonv2",
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers={"User-Agent": self._user_agent},
                timeout=5.0,
                transport=self._transport,
            ) as client:
                response = await client.get("reverse", params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            raise NetworkError(f"Error getting address: {exc}") from exc
        except ValueError as exc:
            raise NetworkError("Error getting address: malformed response") from exc

        if not isinstance(payload, dict) or "error" in payload:
            raise NotFoundError("No address found")

        display_name = payload.get("display_name")
        if not display_name:
            raise NotFoundError("No address found")

        details = payload.get("address") or {}
        locality = next(
            (details[key] for key in _LOCALITY_KEYS if details.get(key)),
            None,
        )
        logger.debug("Reverse geocoded %s to %s", coordinates, display_name)
        return PostalAddress(
            lines=[display_name],
            locality=locality,
            country=details.get("country"),
        )


LocationFactory = Callable[[Coordinates | None], LocationService]


def get_location_factory() -> LocationFactory:
    """FastAPI dependency returning a builder for per-request location services."""

    return DeviceLocationService


LocationFactoryDependency = Annotated[LocationFactory, Depends(get_location_factory)]
