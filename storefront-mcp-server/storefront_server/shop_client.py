"""Shop API client."""

import logging
from typing import Any, Optional, Protocol

import httpx
from pydantic import ValidationError

from .exceptions import ShopApiError
from .models import OrderRequest, OrderResponse, Product, ProductList

logger = logging.getLogger(__name__)


class ShopApi(Protocol):
    """Remote operations the storefront models depend on."""

    async def get_products(self) -> ProductList: ...

    async def get_product_by_id(self, product_id: str) -> Product: ...

    async def create_order(self, order: OrderRequest) -> OrderResponse: ...


class ShopClient:
    """Client for the shop's product and order endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the shop client.

        Args:
            base_url: API root, e.g. https://larek-api.nomoreparties.co/api/weblarek
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the server in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self) -> "ShopClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def get_products(self) -> ProductList:
        """
        Fetch the product list.

        Returns:
            ProductList with items in server order

        Raises:
            ShopApiError: If the request fails or the response is malformed
        """
        data = await self._request("GET", "/product/")
        try:
            products = ProductList.model_validate(data)
        except ValidationError as e:
            raise ShopApiError(f"Malformed product list: {e.error_count()} invalid field(s)") from e

        logger.info(f"Fetched {len(products.items)} products (server total: {products.total})")
        return products

    async def get_product_by_id(self, product_id: str) -> Product:
        """
        Fetch a single product.

        Args:
            product_id: Product ID

        Returns:
            Product

        Raises:
            ShopApiError: If the product does not exist or the request fails
        """
        data = await self._request("GET", f"/product/{product_id}")
        try:
            return Product.model_validate(data)
        except ValidationError as e:
            raise ShopApiError(f"Malformed product {product_id}") from e

    async def create_order(self, order: OrderRequest) -> OrderResponse:
        """
        Place an order.

        Args:
            order: Order payload

        Returns:
            OrderResponse with the new order ID and accepted total

        Raises:
            ShopApiError: If the server rejects the order or the request fails
        """
        logger.info(f"=== CREATE ORDER: items={len(order.items)}, total={order.total} ===")
        data = await self._request("POST", "/order", json=order.model_dump(mode="json"))
        try:
            response = OrderResponse.model_validate(data)
        except ValidationError as e:
            raise ShopApiError("Malformed order response") from e

        logger.info(f"Order created: id={response.id}, total={response.total}")
        return response

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ShopApiError(f"Shop API unreachable: {e}") from e

        logger.debug(f"{method} {url}: status={response.status_code}")

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise ShopApiError(
                    f"Invalid JSON from {url}", status_code=response.status_code
                ) from e

        raise ShopApiError(self._error_message(response), status_code=response.status_code)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the server's ``error`` field, fall back to the reason phrase."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.reason_phrase or f"HTTP {response.status_code}"

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
