from datetime import datetime, timezone
from decimal import Decimal

import pytest

from orderdesk.services.cart import SelectedModifier
from orderdesk.services.discounts import Discount, DiscountValidationError
from orderdesk.services.order_drafts import (
    DraftLine,
    OrderDraft,
    OrderDraftError,
    build_menu_index,
    menu_entry,
    parse_delivery_datetime,
    price_order,
)
from orderdesk.services.order_lifecycle import OrderStatus
from tests.fixtures_data import MENU, NOW, TOMORROW_MORNING

MENU_INDEX = build_menu_index([menu_entry(**entry) for entry in MENU])


def _draft(**overrides) -> OrderDraft:
    values = {
        "customer_name": "Maria Lopez",
        "delivery_datetime": TOMORROW_MORNING,
        "items": [DraftLine(menu_item_id="croissant", quantity=2)],
    }
    values.update(overrides)
    return OrderDraft(**values)


def _price(draft: OrderDraft, max_discount_percentage=50):
    return price_order(draft, MENU_INDEX, max_discount_percentage=max_discount_percentage, now=NOW)


def test_price_order_happy_path_with_item_and_order_discounts():
    draft = _draft(
        customer_name="  Maria Lopez ",
        customer_phone="   ",
        address=" 12 Baker Street ",
        comment="",
        items=[
            DraftLine(
                menu_item_id="croissant",
                quantity=4,
                discount=Discount.build("percentage", 10, "Regular customer"),
            ),
            DraftLine(menu_item_id="latte", quantity=2),
        ],
        order_discount=Discount.build("fixed", 2),
    )

    quote = _price(draft)

    assert quote.status is OrderStatus.PENDING
    assert quote.customer_name == "Maria Lopez"
    assert quote.customer_phone is None
    assert quote.address == "12 Baker Street"
    assert quote.comment is None
    assert quote.delivery_datetime == datetime(2026, 1, 6, 9, 30, tzinfo=timezone.utc)

    croissant, latte = quote.lines
    assert croissant.unit_price == Decimal("3.50")
    assert croissant.subtotal == Decimal("14.00")
    assert croissant.discount_amount == Decimal("1.40")
    assert croissant.final_price == Decimal("12.60")
    assert croissant.discount.reason == "Regular customer"
    assert latte.discount is None
    assert latte.final_price == Decimal("5.50")

    assert quote.totals.subtotal == Decimal("19.50")
    assert quote.totals.item_discounts == Decimal("1.40")
    assert quote.order_discount_amount == Decimal("2.00")
    assert quote.totals.total_discount == Decimal("3.40")
    assert quote.total_amount == Decimal("16.10")


def test_unit_prices_come_from_menu_with_customizations():
    jam = SelectedModifier(modifier_id="jam", group_id="spreads", modifier_name="Jam", price=Decimal("0.75"))
    quote = _price(_draft(items=[DraftLine(menu_item_id="croissant", quantity=2, modifiers=[jam])]))

    assert quote.lines[0].unit_price == Decimal("4.25")
    assert quote.total_amount == Decimal("8.50")


def test_repeated_lines_are_merged():
    quote = _price(
        _draft(
            items=[
                DraftLine(menu_item_id="latte", quantity=1),
                DraftLine(menu_item_id="latte", quantity=2),
            ]
        )
    )

    assert len(quote.lines) == 1
    assert quote.lines[0].quantity == 3


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"customer_name": "   "}, "Customer name is required"),
        ({"delivery_datetime": None}, "Delivery date/time is required"),
        ({"delivery_datetime": ""}, "Delivery date/time is required"),
        ({"delivery_datetime": "next tuesday"}, "Invalid delivery date/time"),
        ({"delivery_datetime": "2026-01-05T11:59:00Z"}, "Delivery date/time must be in the future"),
        ({"items": []}, "At least one item is required"),
        ({"items": [DraftLine(menu_item_id="baguette", quantity=1)]}, "Menu item baguette not found"),
        ({"items": [DraftLine(menu_item_id="tart", quantity=1)]}, "Menu item Lemon Tart is not available"),
        ({"items": [DraftLine(menu_item_id="latte", quantity=0)]}, "Quantity for Latte must be at least 1"),
    ],
)
def test_invalid_drafts_are_rejected(overrides, message):
    with pytest.raises(OrderDraftError, match=message):
        _price(_draft(**overrides))


def test_line_discount_is_validated_against_line_subtotal():
    draft = _draft(items=[DraftLine(menu_item_id="croissant", quantity=2, discount=Discount.build("fixed", "7.01"))])

    with pytest.raises(DiscountValidationError, match="Discount cannot exceed the item price"):
        _price(draft)


def test_percentage_discounts_respect_configured_maximum():
    draft = _draft(order_discount=Discount.build("percentage", 60))

    with pytest.raises(DiscountValidationError, match="Discount cannot exceed 50%"):
        _price(draft)

    quote = _price(draft, max_discount_percentage=75)
    assert quote.total_amount == Decimal("2.80")


def test_order_discount_is_validated_against_discounted_subtotal():
    draft = _draft(
        items=[DraftLine(menu_item_id="croissant", quantity=2, discount=Discount.build("fixed", 3))],
        order_discount=Discount.build("fixed", 5),
    )

    with pytest.raises(DiscountValidationError, match="Discount cannot exceed the item price"):
        _price(draft)


def test_naive_delivery_time_is_treated_as_utc():
    assert parse_delivery_datetime("2026-01-06T09:30:00") == datetime(2026, 1, 6, 9, 30, tzinfo=timezone.utc)
    aware = datetime(2026, 1, 6, 9, 30, tzinfo=timezone.utc)
    assert parse_delivery_datetime(aware) is aware
