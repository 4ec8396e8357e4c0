from datetime import date, datetime, timezone
from decimal import Decimal

from orderdesk.utils.formatting import format_amount, format_currency, format_date, format_datetime, format_discount


def test_format_currency_uses_symbol_grouping_and_cents():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(Decimal("0.125")) == "$0.13"
    assert format_currency(-1) == "-$1.00"
    assert format_currency(3, "eur") == "€3.00"
    assert format_currency(3, "CHF") == "CHF 3.00"


def test_format_date_and_datetime():
    assert format_date(date(2026, 1, 5)) == "Jan 5, 2026"
    assert format_date("2026-12-24T08:00:00Z") == "Dec 24, 2026"
    assert format_datetime(datetime(2026, 1, 5, 14, 30, tzinfo=timezone.utc)) == "Jan 5, 2026, 02:30 PM"


def test_format_discount_labels():
    assert format_discount("percentage", 12.5) == "12.5%"
    assert format_discount("percentage", Decimal("10.00")) == "10%"
    assert format_discount("fixed", 2) == "$2.00"


def test_format_amount_returns_rounded_float():
    assert format_amount(Decimal("1.005")) == 1.01
    assert format_amount("19.5") == 19.5
