from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from orderdesk.services.discounts import (
    ZERO,
    Discount,
    Number,
    calculate_discount_amount,
    round_money,
    to_decimal,
)


class CartLineError(ValueError):
    pass


@dataclass(frozen=True)
class MenuItemRef:
    id: str
    name: str
    price: Decimal
    category: Optional[str] = None


@dataclass(frozen=True)
class SelectedVariation:
    group_id: str
    variation_id: str
    group_name: str = ""
    variation_name: str = ""
    price_adjustment: Decimal = ZERO


@dataclass(frozen=True)
class SelectedModifier:
    modifier_id: str
    group_id: str
    modifier_name: str = ""
    group_name: str = ""
    price: Decimal = ZERO
    quantity: int = 1


@dataclass(frozen=True)
class CartLine:
    item: MenuItemRef
    quantity: int
    variations: tuple[SelectedVariation, ...] = ()
    modifiers: tuple[SelectedModifier, ...] = ()
    discount: Optional[Discount] = None

    @property
    def key(self) -> tuple:
        return line_key(self.item.id, self.variations, self.modifiers)

    @property
    def unit_price(self) -> Decimal:
        price = to_decimal(self.item.price)
        price += sum((to_decimal(v.price_adjustment) for v in self.variations), ZERO)
        price += sum((to_decimal(m.price) * m.quantity for m in self.modifiers), ZERO)
        return price

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal = ZERO
    item_discounts: Decimal = ZERO
    order_discount: Decimal = ZERO
    total_discount: Decimal = ZERO
    final_total: Decimal = ZERO

    def as_dict(self) -> dict[str, float]:
        return {
            "subtotal": float(self.subtotal),
            "item_discounts": float(self.item_discounts),
            "order_discount": float(self.order_discount),
            "total_discount": float(self.total_discount),
            "final_total": float(self.final_total),
        }


def line_key(
    item_id: str,
    variations: Iterable[SelectedVariation] = (),
    modifiers: Iterable[SelectedModifier] = (),
) -> tuple:
    return (str(item_id), tuple(variations), tuple(modifiers))


def line_discount_amount(line: CartLine) -> Decimal:
    if line.discount is None:
        return ZERO
    return calculate_discount_amount(line.subtotal, line.discount.type, line.discount.value)


def calculate_cart_totals(lines: Sequence[CartLine], order_discount: Optional[Discount] = None) -> CartTotals:
    subtotal = ZERO
    item_discounts = ZERO
    discounted_subtotal = ZERO

    for line in lines:
        line_subtotal = line.subtotal
        subtotal += line_subtotal
        discount_amount = line_discount_amount(line)
        item_discounts += discount_amount
        discounted_subtotal += line_subtotal - discount_amount

    # The order discount is taken from what is left after line discounts.
    order_discount_amount = ZERO
    if order_discount is not None and discounted_subtotal > 0:
        order_discount_amount = calculate_discount_amount(
            discounted_subtotal,
            order_discount.type,
            order_discount.value,
        )

    return CartTotals(
        subtotal=round_money(subtotal),
        item_discounts=round_money(item_discounts),
        order_discount=round_money(order_discount_amount),
        total_discount=round_money(item_discounts + order_discount_amount),
        final_total=max(ZERO, round_money(discounted_subtotal - order_discount_amount)),
    )


@dataclass
class Cart:
    """Lines and discounts of an order being put together.

    Lines are identified by menu item plus the exact selection of
    variations and modifiers, so the same croissant with and without extra
    butter lives on two lines.
    """

    _lines: list[CartLine] = field(default_factory=list)
    _order_discount: Optional[Discount] = None

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def order_discount(self) -> Optional[Discount]:
        return self._order_discount

    @property
    def totals(self) -> CartTotals:
        return calculate_cart_totals(self._lines, self._order_discount)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def find(
        self,
        item_id: str,
        variations: Sequence[SelectedVariation] = (),
        modifiers: Sequence[SelectedModifier] = (),
    ) -> Optional[CartLine]:
        key = line_key(item_id, variations, modifiers)
        for line in self._lines:
            if line.key == key:
                return line
        return None

    def _replace_line(self, key: tuple, new_line: Optional[CartLine]) -> None:
        updated: list[CartLine] = []
        for line in self._lines:
            if line.key != key:
                updated.append(line)
            elif new_line is not None:
                updated.append(new_line)
        self._lines = updated

    def add_item(
        self,
        item: MenuItemRef,
        quantity: int,
        variations: Sequence[SelectedVariation] = (),
        modifiers: Sequence[SelectedModifier] = (),
    ) -> CartLine:
        existing = self.find(item.id, variations, modifiers)
        if existing is not None:
            merged = replace(existing, quantity=existing.quantity + quantity)
            self._replace_line(existing.key, merged)
            return merged

        line = CartLine(item=item, quantity=quantity, variations=tuple(variations), modifiers=tuple(modifiers))
        if line.unit_price < 0:
            raise CartLineError(f"Unit price for {item.name} cannot be negative")
        self._lines.append(line)
        return line

    def remove_item(
        self,
        item_id: str,
        variations: Sequence[SelectedVariation] = (),
        modifiers: Sequence[SelectedModifier] = (),
    ) -> None:
        self._replace_line(line_key(item_id, variations, modifiers), None)

    def update_quantity(
        self,
        item_id: str,
        quantity: int,
        variations: Sequence[SelectedVariation] = (),
        modifiers: Sequence[SelectedModifier] = (),
    ) -> None:
        if quantity <= 0:
            self.remove_item(item_id, variations, modifiers)
            return
        existing = self.find(item_id, variations, modifiers)
        if existing is not None:
            self._replace_line(existing.key, replace(existing, quantity=quantity))

    def add_item_discount(
        self,
        item_id: str,
        discount: Discount,
        variations: Sequence[SelectedVariation] = (),
        modifiers: Sequence[SelectedModifier] = (),
    ) -> None:
        existing = self.find(item_id, variations, modifiers)
        if existing is not None:
            self._replace_line(existing.key, replace(existing, discount=discount))

    def remove_item_discount(
        self,
        item_id: str,
        variations: Sequence[SelectedVariation] = (),
        modifiers: Sequence[SelectedModifier] = (),
    ) -> None:
        existing = self.find(item_id, variations, modifiers)
        if existing is not None:
            self._replace_line(existing.key, replace(existing, discount=None))

    def set_order_discount(self, discount: Discount) -> None:
        self._order_discount = discount

    def clear_order_discount(self) -> None:
        self._order_discount = None

    def clear_all_discounts(self) -> None:
        self._lines = [replace(line, discount=None) for line in self._lines]
        self._order_discount = None

    def clear(self) -> None:
        self._lines = []
        self._order_discount = None


def menu_item(id: str, name: str, price: Number, category: Optional[str] = None) -> MenuItemRef:
    return MenuItemRef(id=str(id), name=name, price=to_decimal(price), category=category)
