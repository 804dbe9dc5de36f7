"""Location schemas used by checkout and profile address lookup."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """A single device location fix."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PostalAddress(BaseModel):
    """Reverse-geocoded postal address."""

    lines: list[str] = Field(default_factory=list)
    locality: str | None = None
    country: str | None = None
