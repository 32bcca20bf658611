"""
Public product feed rules.

Turns raw inventory rows into the sanitized product views published to the
storefront website: row validation, text sanitization, numeric clamping,
defaults and the availability label.
"""
import re
from typing import Any, Dict, Iterable, List, Mapping

from .validators import is_number, is_valid_row

AVAILABLE = "Available"
LIMITED = "Limited"
NOT_AVAILABLE = "Not Available"

PLACEHOLDER_IMAGE = "/placeholder.svg"

_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_ANGLE_BRACKETS = re.compile(r"[<>]")

# Rows served when the API runs without a store
DEMO_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "plant_name": "African Olive",
        "scientific_name": "Olea europaea subsp. cuspidata",
        "category": "Indigenous Trees",
        "quantity": 45,
        "price": 1200,
        "description": "Beautiful indigenous tree perfect for landscaping",
        "image_url": "",
        "item_type": None,
        "ready_for_sale": True,
        "sku": "LF-OLIVE-001",
    },
    {
        "id": "2",
        "plant_name": "Acacia Blossom",
        "category": "Organic Honey",
        "quantity": 12,
        "price": 950,
        "age": "3 months",
        "item_type": "Honey",
        "ready_for_sale": True,
        "sku": "LF-HONEY-001",
    },
]


def sanitize_text(value: Any) -> str:
    """
    Make a free-text field safe to render on a third-party page.

    Removes ``<script>`` blocks (case-insensitive, across lines), then any
    remaining angle brackets, then surrounding whitespace. ``None`` becomes
    an empty string. Applying it twice gives the same result as once.
    """
    if value is None:
        return ""
    text = _SCRIPT_BLOCK.sub("", str(value))
    text = _ANGLE_BRACKETS.sub("", text)
    return text.strip()


def is_honey(row: Mapping[str, Any]) -> bool:
    return row.get("item_type") == "Honey" or row.get("category") == "Organic Honey"


def availability_status(quantity, honey: bool = False) -> str:
    """
    Derive the storefront availability label from stock on hand.

    Honey sells by the kilo so its thresholds are lower than for seedlings:

        quantity   honey           plant
        >= 100     Available       Available
        >= 10      Available       Limited
        >= 1       Limited         Not Available
        0          Not Available   Not Available
    """
    if honey:
        if quantity >= 10:
            return AVAILABLE
        if quantity >= 1:
            return LIMITED
        return NOT_AVAILABLE

    if quantity >= 100:
        return AVAILABLE
    if quantity >= 10:
        return LIMITED
    return NOT_AVAILABLE


def to_non_negative(value: Any):
    """Coerce a value to a number >= 0. Non-numeric input gives 0."""
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not is_number(value):
        return 0
    return max(value, 0)


def default_description(name: str, honey: bool, age: str = "") -> str:
    if honey:
        description = f"Pure {name} honey"
        if age:
            description += f", aged {age}"
        return description
    return f"High quality {name} seedlings"


def build_product_view(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the public representation of one valid inventory row.

    Args:
        row: Inventory row mapping that passed ``is_valid_row``

    Returns:
        Dictionary matching ``schemas.ProductView``
    """
    honey = is_honey(row)
    name = sanitize_text(row.get("plant_name"))
    age = sanitize_text(row.get("age"))
    quantity = int(to_non_negative(row.get("quantity")))

    return {
        "id": sanitize_text(row.get("id")),
        "plant_name": name,
        "scientific_name": sanitize_text(row.get("scientific_name")),
        "category": sanitize_text(row.get("category")),
        "quantity": quantity,
        "price": float(to_non_negative(row.get("price"))),
        "description": sanitize_text(row.get("description")) or default_description(name, honey, age),
        "image_url": sanitize_text(row.get("image_url")) or PLACEHOLDER_IMAGE,
        "sku": sanitize_text(row.get("sku")),
        "item_type": sanitize_text(row.get("item_type")),
        "unit": sanitize_text(row.get("unit")) or ("kg" if honey else "seedlings"),
        "age": age,
        "availability_status": availability_status(quantity, honey),
        "ready_for_sale": bool(row.get("ready_for_sale")),
    }


def build_product_feed(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Validate and transform inventory rows into feed entries.

    Invalid rows, and rows whose name is empty once sanitized, are dropped
    silently.
    """
    products = []
    for row in rows:
        if not is_valid_row(row):
            continue
        view = build_product_view(row)
        if not view["plant_name"]:
            continue
        products.append(view)
    return products
