from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Mapping, Optional, Sequence, Union

from orderdesk.services.cart import (
    Cart,
    CartLine,
    CartTotals,
    MenuItemRef,
    SelectedModifier,
    SelectedVariation,
    line_discount_amount,
)
from orderdesk.services.discounts import (
    ZERO,
    Discount,
    Number,
    ensure_valid_discount,
    round_money,
    to_decimal,
)
from orderdesk.services.order_lifecycle import OrderStatus

logger = logging.getLogger(__name__)


class OrderDraftError(ValueError):
    pass


@dataclass(frozen=True)
class MenuEntry:
    id: str
    name: str
    price: Decimal
    is_available: bool = True
    category: Optional[str] = None


@dataclass
class DraftLine:
    menu_item_id: str
    quantity: int
    variations: Sequence[SelectedVariation] = ()
    modifiers: Sequence[SelectedModifier] = ()
    discount: Optional[Discount] = None


@dataclass
class OrderDraft:
    customer_name: str
    delivery_datetime: Union[datetime, str, None]
    items: Sequence[DraftLine] = field(default_factory=list)
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    comment: Optional[str] = None
    order_discount: Optional[Discount] = None


@dataclass(frozen=True)
class QuotedLine:
    menu_item_id: str
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    final_price: Decimal
    discount: Optional[Discount] = None
    discount_amount: Decimal = ZERO
    variations: tuple[SelectedVariation, ...] = ()
    modifiers: tuple[SelectedModifier, ...] = ()


@dataclass(frozen=True)
class OrderQuote:
    customer_name: str
    customer_phone: Optional[str]
    address: Optional[str]
    comment: Optional[str]
    delivery_datetime: datetime
    status: OrderStatus
    lines: tuple[QuotedLine, ...]
    totals: CartTotals
    order_discount: Optional[Discount] = None

    @property
    def total_amount(self) -> Decimal:
        return self.totals.final_total

    @property
    def order_discount_amount(self) -> Decimal:
        return self.totals.order_discount


def _clean(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def parse_delivery_datetime(value: Union[datetime, str, None]) -> datetime:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise OrderDraftError("Delivery date/time is required")
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise OrderDraftError("Invalid delivery date/time") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_menu_index(entries: Sequence[MenuEntry]) -> dict[str, MenuEntry]:
    return {str(entry.id): entry for entry in entries}


def menu_entry(id: str, name: str, price: Number, is_available: bool = True, category: Optional[str] = None) -> MenuEntry:
    return MenuEntry(id=str(id), name=name, price=to_decimal(price), is_available=is_available, category=category)


def _quote_line(line: CartLine) -> QuotedLine:
    discount_amount = line_discount_amount(line)
    return QuotedLine(
        menu_item_id=line.item.id,
        name=line.item.name,
        quantity=line.quantity,
        unit_price=round_money(line.unit_price),
        subtotal=round_money(line.subtotal),
        final_price=max(ZERO, round_money(line.subtotal - discount_amount)),
        discount=line.discount,
        discount_amount=round_money(discount_amount),
        variations=line.variations,
        modifiers=line.modifiers,
    )


def price_order(
    draft: OrderDraft,
    menu: Mapping[str, MenuEntry],
    *,
    max_discount_percentage: Number,
    now: Optional[datetime] = None,
) -> OrderQuote:
    """Validate an order draft and price it against the menu.

    Unit prices always come from ``menu``. Line discounts are checked against
    the line subtotal and the order discount against what is left once line
    discounts are taken off. Nothing is persisted.
    """
    customer_name = (draft.customer_name or "").strip()
    if not customer_name:
        raise OrderDraftError("Customer name is required")

    delivery_at = parse_delivery_datetime(draft.delivery_datetime)
    current_time = now or datetime.now(timezone.utc)
    if current_time.tzinfo is None:
        current_time = current_time.replace(tzinfo=timezone.utc)
    if delivery_at < current_time:
        raise OrderDraftError("Delivery date/time must be in the future")

    if not draft.items:
        raise OrderDraftError("At least one item is required")

    cart = Cart()
    for draft_line in draft.items:
        entry = menu.get(str(draft_line.menu_item_id))
        if entry is None:
            raise OrderDraftError(f"Menu item {draft_line.menu_item_id} not found")
        if not entry.is_available:
            raise OrderDraftError(f"Menu item {entry.name} is not available")
        if draft_line.quantity < 1:
            raise OrderDraftError(f"Quantity for {entry.name} must be at least 1")

        item = MenuItemRef(id=entry.id, name=entry.name, price=entry.price, category=entry.category)
        line = cart.add_item(item, draft_line.quantity, draft_line.variations, draft_line.modifiers)
        if draft_line.discount is not None:
            ensure_valid_discount(line.subtotal, draft_line.discount, max_discount_percentage)
            cart.add_item_discount(item.id, draft_line.discount, draft_line.variations, draft_line.modifiers)

    if draft.order_discount is not None:
        discounted_subtotal = sum((line.subtotal - line_discount_amount(line) for line in cart.lines), ZERO)
        ensure_valid_discount(discounted_subtotal, draft.order_discount, max_discount_percentage)
        cart.set_order_discount(draft.order_discount)

    quote = OrderQuote(
        customer_name=customer_name,
        customer_phone=_clean(draft.customer_phone),
        address=_clean(draft.address),
        comment=_clean(draft.comment),
        delivery_datetime=delivery_at,
        status=OrderStatus.PENDING,
        lines=tuple(_quote_line(line) for line in cart.lines),
        totals=cart.totals,
        order_discount=cart.order_discount,
    )
    logger.info(
        "Order priced: lines=%s items=%s total=%s discount=%s",
        len(quote.lines),
        cart.item_count,
        quote.total_amount,
        quote.totals.total_discount,
    )
    return quote
