from decimal import Decimal

import pytest

from orderdesk.money import format_amount, from_minor_units, to_minor_units, to_wire_amount


@pytest.mark.parametrize(
    "amount,expected",
    [
        (0, 0),
        (50, 5000),
        (0.1, 10),
        (49.5, 4950),
        ("180.25", 18025),
        (Decimal("0.005"), 1),
    ],
)
def test_to_minor_units(amount, expected):
    assert to_minor_units(amount) == expected


def test_repeated_small_prices_do_not_drift():
    assert sum(to_minor_units(0.1) for _ in range(10)) == 100


@pytest.mark.parametrize("amount", [-1, "abc", float("nan"), float("inf"), True])
def test_invalid_amounts_are_rejected(amount):
    with pytest.raises(ValueError):
        to_minor_units(amount)


def test_back_to_major_units():
    assert from_minor_units(5) == Decimal("0.05")
    assert to_wire_amount(10050) == 100.5
    assert format_amount(10000) == "INR 100.00"
    assert format_amount(1999, currency="USD") == "USD 19.99"
