"""Checkout form state and order schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from storefront.config import settings
from storefront.models.location import Coordinates
from storefront.models.product import Product


class PaymentMethod(str, Enum):
    NONE = "NONE"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"

    @property
    def display_name(self) -> str:
        return _PAYMENT_DISPLAY_NAMES[self]


_PAYMENT_DISPLAY_NAMES = {
    PaymentMethod.NONE: "Select Payment Method",
    PaymentMethod.CREDIT_CARD: "Credit Card",
    PaymentMethod.DEBIT_CARD: "Debit Card",
    PaymentMethod.CASH_ON_DELIVERY: "Cash on Delivery",
}


class CheckoutState(BaseModel):
    """Per-order form state."""

    product: Product | None = None
    address: str = ""
    payment_method: PaymentMethod = PaymentMethod.NONE
    delivery_fee: float = Field(default_factory=lambda: settings.DELIVERY_FEE)
    total: float = 0.0
    is_valid: bool = False
    is_loading_location: bool = False
    location_error: str | None = None
    error: str | None = None


class OrderConfirmation(BaseModel):
    """Result of a (simulated) order submission."""

    order_id: str
    product_id: str
    address: str
    payment_method: PaymentMethod
    total: float
    placed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CheckoutRequest(BaseModel):
    """Incoming payload for POST /checkout/{product_id}."""

    address: str = ""
    payment_method: PaymentMethod = PaymentMethod.NONE
    location: Coordinates | None = Field(
        None,
        description="Device fix used to fill the address when none is typed",
    )
