"""View-state schemas exposed by the catalog browsing screen."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.product import Product


class IdleState(BaseModel):
    """Nothing requested yet."""

    model_config = ConfigDict(frozen=True)

    status: Literal["idle"] = "idle"


class LoadingState(BaseModel):
    """Fetch in flight, no data to show."""

    model_config = ConfigDict(frozen=True)

    status: Literal["loading"] = "loading"


class ErrorState(BaseModel):
    """Last fetch failed; the UI offers a retry."""

    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    message: str = Field(..., min_length=1)


class ReadyState(BaseModel):
    """Catalog loaded and filtered by the current criteria."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ready"] = "ready"
    categories: tuple[str, ...] = ()
    visible_products: tuple[Product, ...] = ()
    selected_category: str | None = None


CatalogViewState = Annotated[
    IdleState | LoadingState | ErrorState | ReadyState,
    Field(discriminator="status"),
]


class FilterCriteria(BaseModel):
    """Search text and category currently driving the visible products."""

    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    selected_category: str | None = None


class CatalogSessionResponse(BaseModel):
    """Response returned by the catalog session endpoints."""

    session_id: str
    criteria: FilterCriteria = FilterCriteria()
    state: CatalogViewState


class SearchTextRequest(BaseModel):
    text: str = ""


class CategoryRequest(BaseModel):
    category: str | None = None
