"""Route submitting single-product orders."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from storefront.api.errors import catalog_http_error
from storefront.errors import FormValidationError
from storefront.models.checkout import CheckoutRequest, OrderConfirmation
from storefront.services.clients.catalog_client import CatalogDependency
from storefront.services.clients.location_client import LocationFactoryDependency
from storefront.services.controllers.checkout import CheckoutController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post(
    "/{product_id}",
    response_model=OrderConfirmation,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order for a single product",
)
async def place_order(
    product_id: str,
    payload: CheckoutRequest,
    client: CatalogDependency,
    location_factory: LocationFactoryDependency,
) -> OrderConfirmation:
    controller = CheckoutController(
        product_id,
        client,
        location_factory(payload.location),
    )
    state = await controller.load()
    if state.product is None:
        raise catalog_http_error(controller.failure, "Product not found")

    if payload.address.strip():
        controller.update_address(payload.address)
    elif payload.location is not None:
        await controller.use_current_location()
        if controller.state.location_error:
            raise HTTPException(
                status_code=422,
                detail={"address": controller.state.location_error},
            )
    controller.update_payment_method(payload.payment_method)

    try:
        return await controller.place_order()
    except FormValidationError as exc:
        logger.info("Rejected checkout for %s: %s", product_id, exc.errors)
        raise HTTPException(status_code=422, detail=exc.errors or str(exc)) from exc
