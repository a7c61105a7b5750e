from decimal import Decimal
from typing import Optional

import pytest

from storefront_server.app_state import AppState, create_storefront
from storefront_server.bus import EventBus
from storefront_server.config import Settings
from storefront_server.exceptions import ShopApiError
from storefront_server.models import OrderRequest, OrderResponse, Product, ProductList


class FakeShopApi:
    """In-memory stand-in for the shop API."""

    def __init__(self, products: Optional[list[Product]] = None) -> None:
        self.products = products or []
        self.product_error: Optional[Exception] = None
        self.order_error: Optional[Exception] = None
        self.order_id = "order-1"
        self.created_orders: list[OrderRequest] = []
        self.closed = False

    async def get_products(self) -> ProductList:
        if self.product_error:
            raise self.product_error
        return ProductList(total=len(self.products), items=self.products)

    async def get_product_by_id(self, product_id: str) -> Product:
        for product in self.products:
            if product.id == product_id:
                return product
        raise ShopApiError("NotFound", status_code=404)

    async def create_order(self, order: OrderRequest) -> OrderResponse:
        self.created_orders.append(order)
        if self.order_error:
            raise self.order_error
        return OrderResponse(id=self.order_id, total=order.total)

    async def aclose(self) -> None:
        self.closed = True


def make_product(product_id: str, price=None, **fields) -> Product:
    return Product(
        id=product_id,
        title=fields.pop("title", f"Product {product_id}"),
        price=Decimal(str(price)) if price is not None else None,
        **fields,
    )


class Recorder:
    """Collects payloads emitted for one event."""

    def __init__(self) -> None:
        self.payloads = []

    def __call__(self, payload) -> None:
        self.payloads.append(payload)

    @property
    def last(self):
        return self.payloads[-1]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_url="http://shop.test/api/weblarek",
        cdn_url="http://shop.test/content/weblarek",
        currency="synapses",
    )


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def priced() -> Product:
    return make_product("p-100", 100, category="софт-скил", image="/5_Dots.svg")


@pytest.fixture
def priceless() -> Product:
    return make_product("p-free", None, category="другое")


@pytest.fixture
def fake_api(priced, priceless) -> FakeShopApi:
    return FakeShopApi([priced, priceless])


@pytest.fixture
def storefront(settings, fake_api) -> AppState:
    return create_storefront(settings, api=fake_api)
