"""
Provenance checks for inventory rows.

A row created through the dashboard always carries full metadata; rows that
lack it were inserted directly against the store. The verification endpoint
uses these rules to report which rows the feed is and is not serving.
"""
from typing import Any, Dict, Iterable, List, Mapping, Tuple

DASHBOARD_ITEM_TYPES = {"Plant", "Honey", "Consumable"}

CREATED_VIA_DASHBOARD = "Dashboard"
CREATED_VIA_MANUAL = "Manual/Website"

VERIFICATION_MESSAGE = "API serves only dashboard-managed products"


def missing_fields(row: Mapping[str, Any]) -> Dict[str, bool]:
    """
    Report which completeness checks a row fails.

    Returns:
        Mapping of field name to True when that field is missing
    """
    return {
        "plant_name": not row.get("plant_name"),
        "category": not row.get("category"),
        "price": row.get("price") is None,
        "quantity": row.get("quantity") is None,
        "item_type": row.get("item_type") not in DASHBOARD_ITEM_TYPES,
        "proper_timestamps": not row.get("created_at") or not row.get("updated_at"),
    }


def is_dashboard_managed(row: Mapping[str, Any]) -> bool:
    return not any(missing_fields(row).values())


def classify_products(rows: Iterable[Mapping[str, Any]]) -> Tuple[List[Mapping[str, Any]], List[Mapping[str, Any]]]:
    """
    Split rows into (dashboard_managed, manually_created).

    Every row lands in exactly one of the two lists.
    """
    dashboard_managed = []
    manually_created = []
    for row in rows:
        if is_dashboard_managed(row):
            dashboard_managed.append(row)
        else:
            manually_created.append(row)
    return dashboard_managed, manually_created


def _is_servable(row: Mapping[str, Any]) -> bool:
    quantity = row.get("quantity")
    return row.get("ready_for_sale") is True and quantity is not None and quantity > 0


def _entry(row: Mapping[str, Any], created_via: str) -> Dict[str, Any]:
    price = row.get("price")
    return {
        "id": str(row.get("id")),
        "name": row.get("plant_name"),
        "category": row.get("category"),
        "quantity": row.get("quantity"),
        "price": float(price) if price is not None else None,
        "created_via": created_via,
        "created_at": row.get("created_at"),
    }


def build_verification_report(rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Build the body of the verification endpoint.

    Args:
        rows: Every inventory row

    Returns:
        Dictionary matching ``schemas.VerificationResponse``
    """
    rows = list(rows)
    dashboard_managed, manually_created = classify_products(rows)

    ready_dashboard = [row for row in dashboard_managed if _is_servable(row)]
    ready_manual = [row for row in manually_created if _is_servable(row)]

    manual_products = []
    for row in ready_manual:
        entry = _entry(row, CREATED_VIA_MANUAL)
        entry["missing_fields"] = missing_fields(row)
        manual_products.append(entry)

    return {
        "success": True,
        "summary": {
            "total_products": len(rows),
            "dashboard_managed": len(dashboard_managed),
            "manually_created": len(manually_created),
            "api_serving_dashboard_only": len(ready_dashboard),
            "api_would_serve_manual": len(ready_manual),
        },
        "dashboard_products": [_entry(row, CREATED_VIA_DASHBOARD) for row in ready_dashboard],
        "manual_products": manual_products,
        "message": VERIFICATION_MESSAGE,
    }
