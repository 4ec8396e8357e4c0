from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_MAX_DISCOUNT_PERCENTAGE = 50


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class DiscountValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Discount:
    type: DiscountType
    value: Decimal
    reason: Optional[str] = None

    @classmethod
    def build(cls, type: Union[str, DiscountType], value: Number, reason: Optional[str] = None) -> "Discount":
        reason = (reason or "").strip() or None
        return cls(type=parse_discount_type(type), value=to_decimal(value), reason=reason)


@dataclass(frozen=True)
class DiscountValidation:
    valid: bool
    error: Optional[str] = None


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    """Round a money amount to cents, halves going away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_discount_type(value: Union[str, DiscountType]) -> DiscountType:
    if isinstance(value, DiscountType):
        return value
    normalized = (value or "").strip().lower()
    try:
        return DiscountType(normalized)
    except ValueError as exc:
        raise DiscountValidationError("Invalid discount type") from exc


def calculate_discount_amount(base_price: Number, discount_type: Union[str, DiscountType], discount_value: Number) -> Decimal:
    """Return how much ``discount_value`` takes off ``base_price``.

    Fixed discounts are capped at the base price and percentages at 100% of
    it. The result is not rounded; round once when presenting totals.
    """
    base = to_decimal(base_price)
    value = to_decimal(discount_value)
    resolved_type = parse_discount_type(discount_type)
    if base <= 0:
        return ZERO
    if resolved_type is DiscountType.FIXED:
        return max(ZERO, min(value, base))
    return max(ZERO, min(base * value / HUNDRED, base))


def calculate_final_price(base_price: Number, discount_type: Union[str, DiscountType], discount_value: Number) -> Decimal:
    base = to_decimal(base_price)
    discount_amount = calculate_discount_amount(base, discount_type, discount_value)
    return max(ZERO, round_money(base - discount_amount))


def percentage_text(value: Number) -> str:
    normalized = to_decimal(value).normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")


def validate_discount(
    base_price: Number,
    discount_type: Union[str, DiscountType],
    discount_value: Number,
    max_discount_percentage: Number = DEFAULT_MAX_DISCOUNT_PERCENTAGE,
) -> DiscountValidation:
    base = to_decimal(base_price)
    value = to_decimal(discount_value)
    max_percentage = to_decimal(max_discount_percentage)

    if value < 0:
        return DiscountValidation(valid=False, error="Discount cannot be negative")
    if value == 0:
        return DiscountValidation(valid=False, error="Discount must be greater than 0")

    if parse_discount_type(discount_type) is DiscountType.FIXED:
        if value > base:
            return DiscountValidation(valid=False, error="Discount cannot exceed the item price")
    else:
        if value > HUNDRED:
            return DiscountValidation(valid=False, error="Percentage discount cannot exceed 100%")
        if value > max_percentage:
            return DiscountValidation(
                valid=False,
                error=f"Discount cannot exceed {percentage_text(max_percentage)}%",
            )

    return DiscountValidation(valid=True)


def ensure_valid_discount(
    base_price: Number,
    discount: Discount,
    max_discount_percentage: Number = DEFAULT_MAX_DISCOUNT_PERCENTAGE,
) -> None:
    result = validate_discount(base_price, discount.type, discount.value, max_discount_percentage)
    if not result.valid:
        logger.warning(
            "Discount rejected: type=%s value=%s base=%s reason=%s",
            discount.type.value,
            discount.value,
            base_price,
            result.error,
        )
        raise DiscountValidationError(result.error)
