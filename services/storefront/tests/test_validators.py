from __future__ import annotations

from decimal import Decimal

import pytest

from nursery_api.schemas import StockCheckRequest
from nursery_api.validators import is_number, is_valid_row, validate_stock_check


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, True),
        (3.5, True),
        (Decimal("1.10"), True),
        (Decimal("NaN"), False),
        (float("inf"), False),
        (True, False),
        ("5", False),
        (None, False),
    ],
)
def test_is_number(value, expected) -> None:
    assert is_number(value) is expected


def test_is_valid_row_accepts_zero_stock() -> None:
    assert is_valid_row({"id": "a", "plant_name": "Fig", "quantity": 0, "price": 0})


def test_is_valid_row_rejects_missing_price() -> None:
    assert not is_valid_row({"id": "a", "plant_name": "Fig", "quantity": 3})


@pytest.mark.parametrize(
    "body, message",
    [
        ({}, "Missing required fields: product_id and quantity_sold"),
        ({"product_id": "", "quantity_sold": 1}, "Missing required fields: product_id and quantity_sold"),
        ({"product_id": "abc"}, "Missing required fields: product_id and quantity_sold"),
        ({"product_id": "abc", "quantity_sold": 0}, "quantity_sold must be greater than 0"),
        ({"product_id": "abc", "quantity_sold": -2}, "quantity_sold must be greater than 0"),
    ],
)
def test_validate_stock_check_rejects(body, message) -> None:
    is_valid, error = validate_stock_check(StockCheckRequest(**body))

    assert not is_valid
    assert error == message


def test_validate_stock_check_accepts_numeric_ids() -> None:
    is_valid, error = validate_stock_check(StockCheckRequest(product_id=12, quantity_sold=1))

    assert is_valid
    assert error == ""
