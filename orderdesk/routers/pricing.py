from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from orderdesk.core import config
from orderdesk.schemas.pricing import (
    CartLineOut,
    CartTotalsOut,
    CartTotalsPayload,
    CartTotalsResponse,
    DiscountCheckPayload,
    DiscountPreviewResponse,
    DiscountValidationResponse,
)
from orderdesk.services.cart import Cart, CartLineError, line_discount_amount
from orderdesk.services.discounts import (
    ZERO,
    DiscountValidationError,
    calculate_discount_amount,
    calculate_final_price,
    ensure_valid_discount,
    round_money,
    validate_discount,
)
from orderdesk.utils.formatting import format_amount, format_currency, format_discount

router = APIRouter(prefix="/api/pricing", tags=["pricing"])

logger = logging.getLogger(__name__)


def _max_percentage(payload: DiscountCheckPayload):
    if payload.max_discount_percentage is not None:
        return payload.max_discount_percentage
    return config.MAX_DISCOUNT_PERCENTAGE


@router.post("/discounts/validate", response_model=DiscountValidationResponse)
def validate_discount_endpoint(payload: DiscountCheckPayload):
    result = validate_discount(payload.base_price, payload.type, payload.value, _max_percentage(payload))
    return DiscountValidationResponse(valid=result.valid, error=result.error)


@router.post("/discounts/preview", response_model=DiscountPreviewResponse)
def preview_discount(payload: DiscountCheckPayload):
    result = validate_discount(payload.base_price, payload.type, payload.value, _max_percentage(payload))
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.error)

    discount_amount = calculate_discount_amount(payload.base_price, payload.type, payload.value)
    final_price = calculate_final_price(payload.base_price, payload.type, payload.value)
    return DiscountPreviewResponse(
        base_price=format_amount(payload.base_price),
        discount_amount=format_amount(discount_amount),
        final_price=float(final_price),
        label=format_discount(payload.type, payload.value, config.CURRENCY_CODE),
        formatted_discount_amount=format_currency(discount_amount, config.CURRENCY_CODE),
        formatted_final_price=format_currency(final_price, config.CURRENCY_CODE),
    )


@router.post("/cart/totals", response_model=CartTotalsResponse)
def cart_totals(payload: CartTotalsPayload):
    cart = Cart()
    try:
        for entry in payload.items:
            variations = [variation.to_selection() for variation in entry.variations]
            modifiers = [modifier.to_selection() for modifier in entry.modifiers]
            item = entry.item.to_ref()
            line = cart.add_item(item, entry.quantity, variations, modifiers)
            if entry.discount is not None:
                discount = entry.discount.to_discount()
                ensure_valid_discount(line.subtotal, discount, config.MAX_DISCOUNT_PERCENTAGE)
                cart.add_item_discount(item.id, discount, variations, modifiers)
        if payload.order_discount is not None:
            discount = payload.order_discount.to_discount()
            remaining = sum((line.subtotal - line_discount_amount(line) for line in cart.lines), ZERO)
            ensure_valid_discount(remaining, discount, config.MAX_DISCOUNT_PERCENTAGE)
            cart.set_order_discount(discount)
    except (CartLineError, DiscountValidationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    totals = cart.totals
    lines = []
    for line in cart.lines:
        discount_amount = line_discount_amount(line)
        lines.append(
            CartLineOut(
                item_id=line.item.id,
                name=line.item.name,
                quantity=line.quantity,
                unit_price=format_amount(line.unit_price),
                subtotal=format_amount(line.subtotal),
                discount_amount=format_amount(discount_amount),
                final_price=float(max(round_money(line.subtotal - discount_amount), 0)),
            )
        )

    logger.debug("Cart totals computed: items=%s total=%s", cart.item_count, totals.final_total)
    return CartTotalsResponse(
        item_count=cart.item_count,
        lines=lines,
        totals=CartTotalsOut(**totals.as_dict()),
        formatted_total=format_currency(totals.final_total, config.CURRENCY_CODE),
    )
