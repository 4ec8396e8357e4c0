from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from orderdesk.services.cart import MenuItemRef, SelectedModifier, SelectedVariation
from orderdesk.services.discounts import Discount

MAX_QUANTITY = 1000
MAX_PRICE = Decimal("100000")
MAX_AMOUNT = Decimal("1000000000")


class DiscountPayload(BaseModel):
    type: Literal["fixed", "percentage"]
    value: Decimal = Field(..., ge=-MAX_AMOUNT, le=MAX_AMOUNT)
    reason: Optional[str] = Field(default=None, max_length=200)

    def to_discount(self) -> Discount:
        return Discount.build(self.type, self.value, self.reason)


class DiscountCheckPayload(DiscountPayload):
    base_price: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    max_discount_percentage: Optional[Decimal] = Field(default=None, gt=0, le=100)


class DiscountValidationResponse(BaseModel):
    valid: bool
    error: Optional[str] = None


class DiscountPreviewResponse(BaseModel):
    base_price: float
    discount_amount: float
    final_price: float
    label: str
    formatted_discount_amount: str
    formatted_final_price: str


class VariationPayload(BaseModel):
    group_id: str
    variation_id: str
    group_name: str = ""
    variation_name: str = ""
    price_adjustment: Decimal = Field(default=Decimal("0"), ge=-MAX_PRICE, le=MAX_PRICE)

    def to_selection(self) -> SelectedVariation:
        return SelectedVariation(
            group_id=self.group_id,
            variation_id=self.variation_id,
            group_name=self.group_name,
            variation_name=self.variation_name,
            price_adjustment=self.price_adjustment,
        )


class ModifierPayload(BaseModel):
    modifier_id: str
    group_id: str
    modifier_name: str = ""
    group_name: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_PRICE)
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)

    def to_selection(self) -> SelectedModifier:
        return SelectedModifier(
            modifier_id=self.modifier_id,
            group_id=self.group_id,
            modifier_name=self.modifier_name,
            group_name=self.group_name,
            price=self.price,
            quantity=self.quantity,
        )


class CartItemPayload(BaseModel):
    id: str
    name: str
    price: Decimal = Field(..., ge=0, le=MAX_PRICE)
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("Item name is required")
        return candidate

    def to_ref(self) -> MenuItemRef:
        return MenuItemRef(id=self.id, name=self.name, price=self.price, category=self.category)


class CartLinePayload(BaseModel):
    item: CartItemPayload
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)
    variations: List[VariationPayload] = Field(default_factory=list)
    modifiers: List[ModifierPayload] = Field(default_factory=list)
    discount: Optional[DiscountPayload] = None


class CartTotalsPayload(BaseModel):
    items: List[CartLinePayload] = Field(default_factory=list)
    order_discount: Optional[DiscountPayload] = None


class CartTotalsOut(BaseModel):
    subtotal: float
    item_discounts: float
    order_discount: float
    total_discount: float
    final_total: float


class CartLineOut(BaseModel):
    item_id: str
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    discount_amount: float
    final_price: float


class CartTotalsResponse(BaseModel):
    item_count: int
    lines: List[CartLineOut]
    totals: CartTotalsOut
    formatted_total: str
