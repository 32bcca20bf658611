"""
SQLAlchemy ORM models for the Nursery Storefront API.

Maps the ``inventory`` table maintained by the dashboard. This service only
reads from it.
"""
import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class InventoryItem(Base):
    """
    Inventory row: a plant batch, a honey lot or a consumable.

    Attributes:
        id (str): Opaque unique identifier (uuid)
        plant_name (str): Display name
        scientific_name (str): Botanical name, plants only
        category (str): Free-text category, e.g. "Indigenous Trees" or "Organic Honey"
        quantity (int): Units in stock
        price (Decimal): Unit price
        age (str): Seedling age or honey harvest age
        status (str): Health status recorded by the dashboard
        sku (str): Stock Keeping Unit
        item_type (str): "Plant", "Honey", "Consumable" or None for legacy plant rows
        unit (str): Unit of sale, defaults depend on the item type
        description (str): Marketing copy shown on the storefront
        image_url (str): Product image
        ready_for_sale (bool): Gates visibility on the public feed
        created_at (datetime): Row creation time
        updated_at (datetime): Last dashboard edit
    """
    __tablename__ = "inventory"

    id = Column(String(36), primary_key=True, default=_new_id)
    plant_name = Column(String(255), nullable=False)
    scientific_name = Column(String(255), nullable=True)
    category = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    age = Column(String(100), nullable=True)
    status = Column(String(50), nullable=True)
    sku = Column(String(50), index=True, nullable=True)
    item_type = Column(String(50), index=True, nullable=True)
    unit = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    ready_for_sale = Column(Boolean, nullable=True, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
