"""
Pydantic schemas for request/response validation in the Nursery Storefront API.

These schemas define the structure of data for API requests and responses.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


class ProductView(BaseModel):
    """Sanitized inventory row as published on the public feed."""
    id: str
    plant_name: str
    scientific_name: str = ""
    category: str = ""
    quantity: int = 0
    price: float = 0
    description: str = ""
    image_url: str = ""
    sku: str = ""
    item_type: str = ""
    unit: str = ""
    age: str = ""
    availability_status: str
    ready_for_sale: bool


class ProductFeedResponse(BaseModel):
    """Response body of GET /api/products."""
    success: bool = True
    products: List[ProductView] = Field(default_factory=list)
    total_count: int = 0


class VerificationSummary(BaseModel):
    """Row counts per provenance."""
    total_products: int
    dashboard_managed: int
    manually_created: int
    api_serving_dashboard_only: int
    api_would_serve_manual: int


class MissingFields(BaseModel):
    """Completeness checks a manually created row failed (True means missing)."""
    plant_name: bool = False
    category: bool = False
    price: bool = False
    quantity: bool = False
    item_type: bool = False
    proper_timestamps: bool = False


class VerifiedProduct(BaseModel):
    """
    One sale-ready row in the verification report.

    Attributes:
        id (str): Inventory row ID
        name (str): Plant name as stored
        category (str): Category as stored
        quantity (int): Units in stock
        price (float): Unit price
        created_via (str): "Dashboard" or "Manual/Website"
        created_at (datetime): Row creation time, if recorded
        missing_fields (MissingFields): Only reported for manual rows
    """
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[float] = None
    created_via: str
    created_at: Optional[datetime] = None
    missing_fields: Optional[MissingFields] = None


class VerificationResponse(BaseModel):
    """Response body of GET /api/products/verify."""
    success: bool = True
    summary: VerificationSummary
    dashboard_products: List[VerifiedProduct] = Field(default_factory=list)
    manual_products: List[VerifiedProduct] = Field(default_factory=list)
    message: str


class StockCheckRequest(BaseModel):
    """
    Request body of POST /api/update-inventory.

    Fields are optional here so that missing values produce the endpoint's own
    400 message instead of a schema error.
    """
    product_id: Optional[Union[str, int]] = None
    quantity_sold: Optional[int] = None
    customer_info: Optional[Dict[str, Any]] = None


class ProductSnapshot(BaseModel):
    """Current state of the checked product."""
    id: str
    name: str
    available_quantity: int
    price: float


class StockCheckResponse(BaseModel):
    """Response body of a successful stock check."""
    success: bool = True
    message: str
    product: ProductSnapshot


class ErrorResponse(BaseModel):
    """Body of every error response."""
    success: bool = False
    error: str
    code: Optional[str] = None
