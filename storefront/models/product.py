"""Product domain models mapped from the catalog API."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Rating(BaseModel):
    """Aggregate customer rating attached to a product."""

    model_config = ConfigDict(frozen=True)

    rate: float = Field(..., ge=0, le=5)
    count: int = Field(..., ge=0)


class Product(BaseModel):
    """Immutable product as served by the catalog API."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier of the product")
    title: str
    description: str = ""
    category: str
    price: float = Field(..., ge=0)
    image: str = Field(..., description="URI of the product image")
    rating: Rating = Field(default_factory=lambda: Rating(rate=0, count=0))

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # The public catalog serves integer ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class FavoriteProduct(BaseModel):
    """Flattened product row persisted inside the favorites store."""

    id: str
    title: str
    price: float
    description: str
    category: str
    image: str
    rating: float
    rating_count: int
    timestamp: int = Field(
        default_factory=lambda: int(time.time() * 1000),
        description="Epoch milliseconds when the product was favorited",
    )

    @classmethod
    def from_product(cls, product: Product) -> FavoriteProduct:
        return cls(
            id=product.id,
            title=product.title,
            price=product.price,
            description=product.description,
            category=product.category,
            image=product.image,
            rating=product.rating.rate,
            rating_count=product.rating.count,
        )


class ProductDetailState(BaseModel):
    """State of the product detail screen."""

    product: Product | None = None
    is_loading: bool = False
    error: str | None = None


class ProductDetailResponse(BaseModel):
    """Response returned by GET /products/{product_id}."""

    state: ProductDetailState
    is_favorite: bool = False


class FavoriteToggleResponse(BaseModel):
    product_id: str
    is_favorite: bool
