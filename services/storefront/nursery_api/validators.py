"""
Validation rules for inventory rows and stock-check requests.

Row validation never raises: rows that fail are dropped from the feed.
"""
import math
from decimal import Decimal
from numbers import Number
from typing import Any, Mapping, Tuple
from . import schemas


def is_number(value: Any) -> bool:
    """Return True for real, finite numbers. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, Number):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def is_valid_row(row: Mapping[str, Any]) -> bool:
    """
    Check that an inventory row may be exposed on the public feed.

    Args:
        row: Inventory row mapping

    Returns:
        True if the row has an id and a name and non-negative numeric
        quantity and price
    """
    quantity = row.get("quantity")
    price = row.get("price")
    return (
        row.get("id") is not None
        and row.get("plant_name") is not None
        and is_number(quantity)
        and is_number(price)
        and price >= 0
        and quantity >= 0
    )


def validate_stock_check(request: schemas.StockCheckRequest) -> Tuple[bool, str]:
    """
    Validate a stock-check request before touching the store.

    Args:
        request: Parsed request body

    Returns:
        Tuple of (is_valid, error_message)
    """
    product_id = request.product_id
    if product_id is None or str(product_id).strip() == "" or request.quantity_sold is None:
        return False, "Missing required fields: product_id and quantity_sold"

    if request.quantity_sold <= 0:
        return False, "quantity_sold must be greater than 0"

    return True, ""
