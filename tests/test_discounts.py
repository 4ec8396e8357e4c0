from decimal import Decimal

import pytest

from orderdesk.services.discounts import (
    Discount,
    DiscountType,
    DiscountValidationError,
    calculate_discount_amount,
    calculate_final_price,
    ensure_valid_discount,
    round_money,
    validate_discount,
)


def test_fixed_discount_amount_is_the_value():
    assert calculate_discount_amount(100, "fixed", 10) == 10
    assert calculate_discount_amount(50, "fixed", 5) == 5
    assert calculate_discount_amount(200, "fixed", 25.50) == Decimal("25.50")


def test_percentage_discount_amount_is_share_of_base():
    assert calculate_discount_amount(100, "percentage", 10) == 10
    assert calculate_discount_amount(100, "percentage", 25) == 25
    assert calculate_discount_amount(200, DiscountType.PERCENTAGE, 15) == 30


def test_zero_discounts_take_nothing_off():
    assert calculate_discount_amount(100, "percentage", 0) == 0
    assert calculate_discount_amount(100, "fixed", 0) == 0


def test_discount_amount_is_capped_at_base_price():
    assert calculate_discount_amount(100, "percentage", 100) == 100
    assert calculate_discount_amount(10, "fixed", 25) == 10
    assert calculate_discount_amount(10, "percentage", 150) == 10


def test_discount_amount_rounds_to_cents():
    assert round_money(calculate_discount_amount(99.99, "percentage", 33.33)) == Decimal("33.33")
    assert round_money(calculate_discount_amount(100, "percentage", 33.333)) == Decimal("33.33")


def test_round_money_rounds_halves_up():
    assert round_money("2.675") == Decimal("2.68")
    assert round_money(0.125) == Decimal("0.13")
    assert round_money(3) == Decimal("3.00")


def test_final_price_after_discount():
    assert calculate_final_price(100, "fixed", 10) == 90
    assert calculate_final_price(50, "fixed", 5) == 45
    assert calculate_final_price(100, "percentage", 10) == 90
    assert calculate_final_price(100, "percentage", 25) == 75
    assert calculate_final_price(200, "percentage", 15) == 170


def test_final_price_is_zero_for_full_discount_and_never_negative():
    assert calculate_final_price(100, "fixed", 100) == 0
    assert calculate_final_price(100, "percentage", 100) == 0
    assert calculate_final_price(20, "fixed", 35) == 0


def test_final_price_rounds_to_cents():
    assert calculate_final_price(99.99, "percentage", 33.33) == Decimal("66.66")


@pytest.mark.parametrize(
    ("discount_type", "value"),
    [("fixed", 10), ("fixed", 0.01), ("fixed", 50), ("percentage", 10), ("percentage", 1), ("percentage", 50)],
)
def test_validate_discount_accepts_reasonable_values(discount_type, value):
    assert validate_discount(100, discount_type, value).valid is True


def test_validate_discount_rejections_and_messages():
    assert validate_discount(100, "fixed", -10).error == "Discount cannot be negative"
    assert validate_discount(100, "percentage", -0.01).error == "Discount cannot be negative"
    assert validate_discount(100, "fixed", 0).error == "Discount must be greater than 0"
    assert validate_discount(100, "percentage", 0).error == "Discount must be greater than 0"
    assert validate_discount(100, "fixed", 101).error == "Discount cannot exceed the item price"
    assert validate_discount(50, "fixed", 50.01).valid is False
    assert validate_discount(100, "percentage", 101).error == "Percentage discount cannot exceed 100%"
    assert validate_discount(100, "percentage", 150).valid is False
    assert validate_discount(100, "percentage", 60).error == "Discount cannot exceed 50%"


def test_validate_discount_honours_custom_maximum_percentage():
    assert validate_discount(100, "percentage", 60, 75).valid is True
    result = validate_discount(100, "percentage", 76, 75)
    assert result.valid is False
    assert result.error == "Discount cannot exceed 75%"


def test_validate_discount_prints_fractional_maximum():
    assert validate_discount(100, "percentage", 20, 12.5).error == "Discount cannot exceed 12.5%"
    assert validate_discount(100, "percentage", 60, 50.0).error == "Discount cannot exceed 50%"


def test_ensure_valid_discount_raises_with_message():
    discount = Discount.build("fixed", 30, reason="  ")

    assert discount.reason is None
    with pytest.raises(DiscountValidationError, match="Discount cannot exceed the item price"):
        ensure_valid_discount(20, discount)

    ensure_valid_discount(40, discount)


def test_unknown_discount_type_is_rejected():
    with pytest.raises(DiscountValidationError, match="Invalid discount type"):
        calculate_discount_amount(10, "bogo", 1)

    with pytest.raises(DiscountValidationError, match="Invalid discount type"):
        calculate_discount_amount(0, "bogo", 1)


@pytest.mark.parametrize("base", [0, -4, "-0.01"])
def test_discount_on_non_positive_base_is_zero(base):
    assert calculate_discount_amount(base, "percentage", 10) == 0
    assert calculate_discount_amount(base, "fixed", 2) == 0
    assert calculate_final_price(base, "fixed", 2) == 0
