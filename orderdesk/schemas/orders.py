from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from orderdesk.schemas.pricing import (
    MAX_PRICE,
    MAX_QUANTITY,
    CartTotalsOut,
    DiscountPayload,
    ModifierPayload,
    VariationPayload,
)


class MenuEntryPayload(BaseModel):
    id: str
    name: str
    price: Decimal = Field(..., ge=0, le=MAX_PRICE)
    is_available: bool = True
    category: Optional[str] = None


class OrderLinePayload(BaseModel):
    menu_item_id: str
    quantity: int = Field(..., le=MAX_QUANTITY)
    variations: List[VariationPayload] = Field(default_factory=list)
    modifiers: List[ModifierPayload] = Field(default_factory=list)
    discount: Optional[DiscountPayload] = None


class OrderQuotePayload(BaseModel):
    customer_name: str = ""
    customer_phone: Optional[str] = None
    delivery_datetime: Optional[str] = None
    address: Optional[str] = None
    comment: Optional[str] = None
    items: List[OrderLinePayload] = Field(default_factory=list)
    order_discount: Optional[DiscountPayload] = None
    menu: List[MenuEntryPayload] = Field(default_factory=list)


class DiscountOut(BaseModel):
    type: str
    value: float
    reason: Optional[str] = None
    amount: float


class QuotedLineOut(BaseModel):
    menu_item_id: str
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    final_price: float
    discount: Optional[DiscountOut] = None


class OrderQuoteResponse(BaseModel):
    status: str
    customer_name: str
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    comment: Optional[str] = None
    delivery_datetime: datetime
    delivery_label: str
    lines: List[QuotedLineOut]
    order_discount: Optional[DiscountOut] = None
    totals: CartTotalsOut
    total_amount: float
    formatted_total: str


class StatusChangePayload(BaseModel):
    role: str
    current_status: str
    status: str
    deleted: bool = False


class StatusChangeResponse(BaseModel):
    ok: bool
    changed: bool
    previous_status: str
    status: str
    next_status: Optional[str] = None


class LifecycleStep(BaseModel):
    status: str
    next_status: Optional[str] = None


class LifecycleResponse(BaseModel):
    statuses: List[LifecycleStep]


class BoardResponse(BaseModel):
    role: str
    statuses: List[str]
    settable_statuses: List[str]
