from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from orderdesk.core import config
from orderdesk.core.metrics import status_change_metrics
from orderdesk.core.request_context import set_request_context
from orderdesk.schemas.orders import (
    BoardResponse,
    DiscountOut,
    LifecycleResponse,
    LifecycleStep,
    OrderQuotePayload,
    OrderQuoteResponse,
    QuotedLineOut,
    StatusChangePayload,
    StatusChangeResponse,
)
from orderdesk.schemas.pricing import CartTotalsOut
from orderdesk.services.cart import CartLineError
from orderdesk.services.discounts import Discount, DiscountValidationError
from orderdesk.services.order_drafts import (
    DraftLine,
    OrderDraft,
    OrderDraftError,
    build_menu_index,
    menu_entry,
    price_order,
)
from orderdesk.services.order_lifecycle import (
    STATUS_FLOW,
    InvalidRoleError,
    StatusChangeError,
    StatusPermissionError,
    allowed_statuses_for,
    authorize_status_change,
    board_statuses,
    next_status,
)
from orderdesk.utils.formatting import format_amount, format_currency, format_datetime

router = APIRouter(prefix="/api/orders", tags=["orders"])

logger = logging.getLogger(__name__)


def _discount_to_dict(discount: Optional[Discount], amount) -> Optional[DiscountOut]:
    if discount is None:
        return None
    return DiscountOut(
        type=discount.type.value,
        value=float(discount.value),
        reason=discount.reason,
        amount=format_amount(amount),
    )


@router.post("/quote", response_model=OrderQuoteResponse)
def quote_order(payload: OrderQuotePayload):
    menu = build_menu_index(
        [
            menu_entry(entry.id, entry.name, entry.price, entry.is_available, entry.category)
            for entry in payload.menu
        ]
    )
    draft = OrderDraft(
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        delivery_datetime=payload.delivery_datetime,
        address=payload.address,
        comment=payload.comment,
        items=[
            DraftLine(
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                variations=[variation.to_selection() for variation in line.variations],
                modifiers=[modifier.to_selection() for modifier in line.modifiers],
                discount=line.discount.to_discount() if line.discount else None,
            )
            for line in payload.items
        ],
        order_discount=payload.order_discount.to_discount() if payload.order_discount else None,
    )

    try:
        quote = price_order(draft, menu, max_discount_percentage=config.MAX_DISCOUNT_PERCENTAGE)
    except (OrderDraftError, CartLineError, DiscountValidationError) as exc:
        logger.warning("Order quote rejected: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return OrderQuoteResponse(
        status=quote.status.value,
        customer_name=quote.customer_name,
        customer_phone=quote.customer_phone,
        address=quote.address,
        comment=quote.comment,
        delivery_datetime=quote.delivery_datetime,
        delivery_label=format_datetime(quote.delivery_datetime),
        lines=[
            QuotedLineOut(
                menu_item_id=line.menu_item_id,
                name=line.name,
                quantity=line.quantity,
                unit_price=float(line.unit_price),
                subtotal=float(line.subtotal),
                final_price=float(line.final_price),
                discount=_discount_to_dict(line.discount, line.discount_amount),
            )
            for line in quote.lines
        ],
        order_discount=_discount_to_dict(quote.order_discount, quote.order_discount_amount),
        totals=CartTotalsOut(**quote.totals.as_dict()),
        total_amount=float(quote.total_amount),
        formatted_total=format_currency(quote.total_amount, config.CURRENCY_CODE),
    )


@router.get("/statuses", response_model=LifecycleResponse)
def list_statuses():
    steps = []
    for status in STATUS_FLOW:
        following = next_status(status)
        steps.append(LifecycleStep(status=status.value, next_status=following.value if following else None))
    return LifecycleResponse(statuses=steps)


@router.get("/board/{role}", response_model=BoardResponse)
def role_board(role: str):
    try:
        statuses = board_statuses(role)
        settable = allowed_statuses_for(role)
    except InvalidRoleError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return BoardResponse(
        role=role.strip().lower(),
        statuses=[status.value for status in statuses],
        settable_statuses=[status.value for status in STATUS_FLOW if status in settable],
    )


@router.post("/status-change", response_model=StatusChangeResponse)
def change_status(body: StatusChangePayload, request: Request):
    request.state.user_role = body.role
    set_request_context(user_role=body.role)
    try:
        change = authorize_status_change(body.role, body.current_status, body.status, deleted=body.deleted)
    except StatusPermissionError as exc:
        status_change_metrics.record(body.role, body.status, "denied")
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except StatusChangeError as exc:
        status_change_metrics.record(body.role, body.status, "rejected")
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    status_change_metrics.record(body.role, body.status, "allowed")

    following = next_status(change.current)
    return StatusChangeResponse(
        ok=True,
        changed=change.changed,
        previous_status=change.previous.value,
        status=change.current.value,
        next_status=following.value if following else None,
    )
