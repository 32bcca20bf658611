"""
Read operations against the inventory store.

This module contains every database query the storefront API makes. Nothing
here writes to the store: inventory is maintained through the dashboard.
"""
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from . import models
from .errors import UpstreamStoreError

logger = logging.getLogger(__name__)


def row_to_dict(item: models.InventoryItem) -> Dict[str, Any]:
    """
    Convert an inventory row into a plain mapping of column name to value.

    Args:
        item: InventoryItem ORM object

    Returns:
        Dictionary with one entry per table column
    """
    return {column.name: getattr(item, column.name) for column in item.__table__.columns}


def get_sale_ready_products(db: Session) -> List[Dict[str, Any]]:
    """
    Retrieve the rows the public feed may expose.

    Only sale-ready plant and honey rows qualify: honey is recognised by its
    item type or the "Organic Honey" category, plants are the rows without an
    item type. Consumables never match.

    Args:
        db: Database session

    Returns:
        List of row mappings ordered by plant name

    Raises:
        UpstreamStoreError: If the query fails
    """
    Item = models.InventoryItem
    try:
        rows = (
            db.query(Item)
            .filter(Item.ready_for_sale.is_(True))
            .filter(or_(
                Item.item_type == "Honey",
                Item.category == "Organic Honey",
                Item.item_type.is_(None),
            ))
            .order_by(Item.plant_name.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching sale-ready products: {e}")
        raise UpstreamStoreError("Failed to fetch products") from e
    return [row_to_dict(row) for row in rows]


def get_all_products(db: Session) -> List[Dict[str, Any]]:
    """
    Retrieve every inventory row, oldest first.

    Raises:
        UpstreamStoreError: If the query fails
    """
    try:
        rows = db.query(models.InventoryItem).order_by(models.InventoryItem.created_at).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching inventory for verification: {e}")
        raise UpstreamStoreError("Failed to fetch products") from e
    return [row_to_dict(row) for row in rows]


def get_inventory_item(db: Session, item_id: str) -> Optional[Dict[str, Any]]:
    """
    Retrieve a single inventory row by ID.

    Args:
        db: Database session
        item_id: ID of the inventory row

    Returns:
        Row mapping or None if not found

    Raises:
        UpstreamStoreError: If the query fails
    """
    try:
        item = db.query(models.InventoryItem).filter(models.InventoryItem.id == item_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching product {item_id}: {e}")
        raise UpstreamStoreError("Failed to fetch product") from e
    return row_to_dict(item) if item is not None else None
