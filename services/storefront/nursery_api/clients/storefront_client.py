"""
HTTP client for the storefront side of the integration.

This module does what the storefront website does with the API: poll the
product feed, keep a cart, and run a stock check for every cart line at
checkout.

Note that the stock check does not reserve or deduct stock on the server, so
a successful checkout here only means the quantities were available when
checked.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from .. import config

logger = logging.getLogger(__name__)

TIMEOUT = 5.0  # seconds
POLL_INTERVAL = 300.0  # five minutes


class StorefrontError(Exception):
    """The API answered with a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CheckoutError(StorefrontError):
    """
    A cart line failed its stock check.

    Attributes:
        confirmed: Responses for the lines checked before the failure
        failed_line: The cart line that failed
    """

    def __init__(self, message: str, confirmed: List[Dict[str, Any]], failed_line: Dict[str, Any],
                 status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.confirmed = confirmed
        self.failed_line = failed_line


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    return f"HTTP {response.status_code}"


class Cart:
    """Client-side cart keyed by product ID."""

    def __init__(self):
        self._lines: Dict[str, Dict[str, Any]] = {}

    def add(self, product: Dict[str, Any], quantity: int = 1) -> int:
        """
        Add a product to the cart, merging with an existing line.

        The line quantity never exceeds the stock the feed reported.

        Args:
            product: Product entry from the feed
            quantity: Units to add

        Returns:
            Quantity now on the line

        Raises:
            ValueError: If quantity is not positive or the product is out of stock
        """
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")
        in_stock = int(product.get("quantity") or 0)
        if in_stock <= 0:
            raise ValueError(f"{product.get('plant_name')} is out of stock")

        product_id = str(product["id"])
        line = self._lines.get(product_id)
        current = line["quantity"] if line else 0
        new_quantity = min(current + quantity, in_stock)
        self._lines[product_id] = {"product": product, "quantity": new_quantity}
        return new_quantity

    def remove(self, product_id: str) -> None:
        self._lines.pop(str(product_id), None)

    def clear(self) -> None:
        self._lines.clear()

    def lines(self) -> List[Dict[str, Any]]:
        return list(self._lines.values())

    @property
    def item_count(self) -> int:
        return sum(line["quantity"] for line in self._lines.values())

    @property
    def total(self) -> float:
        return sum(float(line["product"].get("price") or 0) * line["quantity"] for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)


class StorefrontClient:
    """
    Async client for the storefront endpoints.

    Args:
        base_url: API root, defaults to STOREFRONT_API_URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or config.STOREFRONT_API_URL).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def fetch_products(self) -> List[Dict[str, Any]]:
        """
        Retrieve the current product feed.

        Returns:
            List of product entries

        Raises:
            StorefrontError: If the API reports a failure (including rate limiting)
            httpx.HTTPError: If there's a network error or the service is unavailable
        """
        async with self._client() as client:
            response = await client.get("/api/products")

        if response.status_code != 200:
            raise StorefrontError(_error_message(response), response.status_code)
        body = response.json()
        if not body.get("success"):
            raise StorefrontError(body.get("error") or "Feed request failed", response.status_code)
        return body.get("products", [])

    async def check_stock(self, product_id: str, quantity: int,
                          customer_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Ask the API whether a quantity of a product can be sold.

        Returns:
            Response body with the product snapshot

        Raises:
            StorefrontError: With the server's message on 400/404/500
            httpx.HTTPError: If there's a network error or the service is unavailable
        """
        payload = {"product_id": product_id, "quantity_sold": quantity, "customer_info": customer_info}
        async with self._client() as client:
            response = await client.post("/api/update-inventory", json=payload)

        if response.status_code != 200:
            raise StorefrontError(_error_message(response), response.status_code)
        return response.json()

    async def checkout(self, cart: Cart, customer_info: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Check every cart line in order and clear the cart if all pass.

        The first failing line stops the checkout. Lines already confirmed
        are reported on the error; nothing is rolled back.

        Returns:
            One stock-check response per cart line

        Raises:
            CheckoutError: If a line fails its stock check
        """
        confirmed = []
        for line in cart.lines():
            product_id = str(line["product"]["id"])
            try:
                result = await self.check_stock(product_id, line["quantity"], customer_info)
            except StorefrontError as e:
                logger.warning(f"Checkout stopped at {product_id}: {e.message}")
                raise CheckoutError(e.message, confirmed, line, e.status_code) from e
            confirmed.append(result)

        cart.clear()
        return confirmed

    async def poll_products(self, on_update: Callable[[List[Dict[str, Any]]], None],
                            interval: float = POLL_INTERVAL, iterations: Optional[int] = None) -> None:
        """
        Refresh the catalog periodically.

        Args:
            on_update: Called with the product list after each successful fetch
            interval: Seconds between fetches
            iterations: Number of fetches to run, forever when None
        """
        count = 0
        while iterations is None or count < iterations:
            try:
                on_update(await self.fetch_products())
            except (StorefrontError, httpx.HTTPError) as e:
                logger.warning(f"Catalog refresh failed: {e}")
            count += 1
            if iterations is None or count < iterations:
                await asyncio.sleep(interval)
