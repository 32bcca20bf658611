"""
    Nursery Storefront API

    This module implements the FastAPI service that connects the nursery's
    inventory database to its public storefront website. The dashboard owns the
    inventory; this service only reads it.

    The service exposes:
    - GET /api/products: Public feed of sale-ready plants and honey (rate limited)
    - GET /api/products/verify: Report of dashboard-managed vs manually created rows
    - POST /api/update-inventory: Stock check run by the storefront at checkout
    - OPTIONS preflight for the two storefront endpoint families
    - Health endpoint: Provides service health status for monitoring and orchestration

    Attributes:
        app (FastAPI): The application served by uvicorn, built by create_app()
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import catalog, config, crud, models, provenance, schemas, validators
from .cors import PRODUCTS, UPDATE_INVENTORY, cors_policy, preflight_response
from .database import engine, get_db
from .errors import InternalError, NotFoundError, NurseryAPIError, ValidationError
from .rate_limit import RateLimiter, build_rate_limiter, enforce_rate_limit

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the storefront API.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): "healthy" if the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}


@router.get(
    "/api/products",
    response_model=schemas.ProductFeedResponse,
    responses={429: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}},
)
def list_products(
    _: None = Depends(enforce_rate_limit),
    cors: dict = Depends(cors_policy(PRODUCTS)),
    db: Session = Depends(get_db),
):
    """
    Public product feed consumed by the storefront website.

    Serves sale-ready honey and plant rows, sanitized for rendering on a
    third-party page. Rows that fail validation are left out without error.

    Returns:
        Feed with the products and their count

    Raises:
        RateLimitError: 429 when the caller exceeded its request budget
        UpstreamStoreError: 500 if the store query fails
    """
    if config.DEMO_MODE:
        rows = catalog.DEMO_PRODUCTS
    else:
        rows = crud.get_sale_ready_products(db)

    products = catalog.build_product_feed(rows)
    return {"success": True, "products": products, "total_count": len(products)}


@router.options("/api/products")
def products_preflight():
    """CORS preflight for the products endpoint family."""
    return preflight_response(PRODUCTS)


@router.get(
    "/api/products/verify",
    response_model=schemas.VerificationResponse,
    responses={500: {"model": schemas.ErrorResponse}},
)
def verify_products(db: Session = Depends(get_db)):
    """
    Report which inventory rows are dashboard-managed and which were created
    directly against the store. Diagnostic only.

    Raises:
        UpstreamStoreError: 500 with code DATABASE_ERROR if the store query fails
    """
    rows = crud.get_all_products(db)
    report = provenance.build_verification_report(rows)
    logger.info(
        f"Verification: {report['summary']['dashboard_managed']} dashboard-managed, "
        f"{report['summary']['manually_created']} manual of {report['summary']['total_products']}"
    )
    return report


@router.post(
    "/api/update-inventory",
    response_model=schemas.StockCheckResponse,
    responses={code: {"model": schemas.ErrorResponse} for code in (400, 404, 500)},
)
def check_stock(
    payload: schemas.StockCheckRequest,
    cors: dict = Depends(cors_policy(UPDATE_INVENTORY)),
    db: Session = Depends(get_db),
):
    """
    Confirm that a storefront purchase can be fulfilled.

    Despite its path this endpoint does not change the stored quantity: it
    validates the request against current stock and returns a snapshot of the
    product. Inventory is only decremented through the dashboard.

    Args:
        payload: product_id, quantity_sold and optional customer_info

    Returns:
        Success message and the product snapshot

    Raises:
        ValidationError: 400 on missing input, bad quantity or insufficient stock
        NotFoundError: 404 if the product does not exist
        UpstreamStoreError: 500 if the store query fails
    """
    if config.DEMO_MODE:
        raise ValidationError("Demo mode - inventory updates disabled")

    is_valid, error_message = validators.validate_stock_check(payload)
    if not is_valid:
        raise ValidationError(error_message)

    product_id = str(payload.product_id)
    product = crud.get_inventory_item(db, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    available = product.get("quantity") or 0
    if available < payload.quantity_sold:
        raise ValidationError(f"Insufficient inventory. Only {available} available")

    logger.info(
        f"Stock check passed for {product_id}: {payload.quantity_sold} requested, "
        f"{available} available, customer info {'given' if payload.customer_info else 'absent'}"
    )
    return {
        "success": True,
        "message": "Product available for purchase",
        "product": {
            "id": product_id,
            "name": product.get("plant_name") or "",
            "available_quantity": available,
            "price": float(product.get("price") or 0),
        },
    }


@router.options("/api/update-inventory")
def update_inventory_preflight():
    """CORS preflight for the update-inventory endpoint family."""
    return preflight_response(UPDATE_INVENTORY)


async def handle_api_error(request: Request, exc: NurseryAPIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = getattr(request.state, "cors_headers", None)
    return JSONResponse(exc.to_body(), status_code=exc.status_code, headers=headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request body for {request.url.path}: {exc.errors()}")
    return await handle_api_error(request, ValidationError("Invalid request body"))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    error = InternalError()
    body = {"success": False, "error": error.message}
    return JSONResponse(body, status_code=error.status_code)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.INIT_SCHEMA:
        # Local development only: production tables are owned by the dashboard
        models.Base.metadata.create_all(bind=engine)
    yield


def create_app(rate_limiter: Optional[RateLimiter] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        rate_limiter: Limiter guarding the product feed; built from the
            configuration when omitted

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(title="nursery-storefront-api", lifespan=lifespan)
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else build_rate_limiter()

    app.add_exception_handler(NurseryAPIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)
    return app


app = create_app()
