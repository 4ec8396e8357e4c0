from __future__ import annotations

from datetime import date, datetime
from typing import Union

from orderdesk.services.discounts import (
    DiscountType,
    Number,
    parse_discount_type,
    percentage_text,
    round_money,
)

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

DateLike = Union[date, datetime, str]


def format_currency(amount: Number, currency: str = "USD") -> str:
    value = round_money(amount)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def _to_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    # fromisoformat does not take the "Z" suffix before 3.11
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_date(value: DateLike) -> str:
    moment = _to_datetime(value)
    return f"{moment:%b} {moment.day}, {moment.year}"


def format_datetime(value: DateLike) -> str:
    moment = _to_datetime(value)
    return f"{format_date(moment)}, {moment:%I:%M %p}"


def format_amount(amount: Number) -> float:
    """Money as the JSON number the API returns."""
    return float(round_money(amount))


def format_discount(discount_type, value: Number, currency: str = "USD") -> str:
    if parse_discount_type(discount_type) is DiscountType.PERCENTAGE:
        return f"{percentage_text(value)}%"
    return format_currency(value, currency)
