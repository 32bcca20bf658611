"""
Cross-origin policy for the storefront endpoints.

Each endpoint family is served to one storefront site in production and to
any origin elsewhere. Preflight responses and regular responses both take
their headers from ``CORS_FAMILIES``.
"""
from typing import Callable, Dict

from fastapi import Request, Response

from . import config

PRODUCTS = "products"
UPDATE_INVENTORY = "update_inventory"

# Endpoint family -> name of the config setting holding its production origin
CORS_FAMILIES: Dict[str, str] = {
    PRODUCTS: "PRODUCTS_ORIGIN",
    UPDATE_INVENTORY: "STOCK_CHECK_ORIGIN",
}

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type"


def allowed_origin(family: str) -> str:
    setting = CORS_FAMILIES[family]
    if config.is_production():
        return getattr(config, setting)
    return "*"


def cors_headers(family: str) -> Dict[str, str]:
    """
    Build the CORS headers for an endpoint family.

    Raises:
        KeyError: If the family is not registered in CORS_FAMILIES
    """
    return {
        "Access-Control-Allow-Origin": allowed_origin(family),
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Vary": "Origin",
    }


def preflight_response(family: str) -> Response:
    """Empty 200 response answering an OPTIONS preflight."""
    return Response(status_code=200, headers=cors_headers(family))


def cors_policy(family: str) -> Callable[[Request, Response], Dict[str, str]]:
    """
    Dependency factory applying a family's CORS headers to the response.

    The headers are also kept on ``request.state`` so error responses raised
    later in the handler carry them too.
    """
    def apply(request: Request, response: Response) -> Dict[str, str]:
        headers = cors_headers(family)
        request.state.cors_headers = headers
        response.headers.update(headers)
        return headers
    return apply
