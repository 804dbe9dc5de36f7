"""Checkout screen: delivery address, payment method, total and submission."""

from __future__ import annotations

import asyncio
import logging
import uuid

from storefront.config import settings
from storefront.errors import FormValidationError, error_message
from storefront.models.checkout import CheckoutState, OrderConfirmation, PaymentMethod
from storefront.services.clients.catalog_client import CatalogClient
from storefront.services.clients.location_client import LocationService

logger = logging.getLogger(__name__)


def calculate_total(price: float, delivery_fee: float) -> float:
    return round(price + delivery_fee, 2)


class CheckoutController:
    """Form state for ordering a single product."""

    def __init__(
        self,
        product_id: str,
        client: CatalogClient,
        location: LocationService,
        *,
        submit_delay: float | None = None,
    ) -> None:
        self.product_id = product_id
        self._client = client
        self._location = location
        self._submit_delay = (
            settings.ORDER_SUBMIT_DELAY_SECONDS
            if submit_delay is None
            else submit_delay
        )
        self.state = CheckoutState()
        self.failure: Exception | None = None

    async def load(self) -> CheckoutState:
        try:
            product = await self._client.fetch_product(self.product_id)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning(
                "Checkout could not load product %s: %s", self.product_id, exc
            )
            self.failure = exc
            self._update(error=error_message(exc))
            return self.state

        self.failure = None
        self._update(
            product=product,
            total=calculate_total(product.price, self.state.delivery_fee),
            error=None,
        )
        return self.state

    def update_address(self, address: str) -> None:
        self._update(address=address)
        self._validate()

    def update_payment_method(self, method: PaymentMethod) -> None:
        self._update(payment_method=method)
        self._validate()

    async def use_current_location(self) -> None:
        """Fill the address from the device location."""

        if not self._location.has_permission():
            self._update(location_error="Location permission not granted")
            return

        self._update(is_loading_location=True)
        try:
            address = await self._location.lookup_address()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._update(
                location_error=error_message(exc, "Error getting location"),
                is_loading_location=False,
            )
            return

        self._update(address=address, is_loading_location=False, location_error=None)
        self._validate()

    async def place_order(self) -> OrderConfirmation:
        """Submit the order; the backend call is simulated."""

        self._validate()
        product = self.state.product
        if product is None:
            raise FormValidationError("Product is not loaded")
        if not self.state.is_valid:
            errors = {}
            if not self.state.address.strip():
                errors["address"] = "Address is required"
            if self.state.payment_method is PaymentMethod.NONE:
                errors["payment_method"] = "Select a payment method"
            raise FormValidationError("Checkout form is incomplete", errors)

        await asyncio.sleep(self._submit_delay)
        confirmation = OrderConfirmation(
            order_id=uuid.uuid4().hex,
            product_id=product.id,
            address=self.state.address,
            payment_method=self.state.payment_method,
            total=self.state.total,
        )
        logger.info(
            "Order placed",
            extra={"order_id": confirmation.order_id, "product_id": product.id},
        )
        return confirmation

    def _validate(self) -> None:
        self._update(
            is_valid=bool(self.state.address.strip())
            and self.state.payment_method is not PaymentMethod.NONE
        )

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)
