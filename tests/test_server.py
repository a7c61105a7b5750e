import json

import pytest
import pytest_asyncio
from pydantic import AnyUrl

from storefront_server import server
from storefront_server.views import attach_host

VALID_PHONE = "+7 (123) 456-78-90"


@pytest_asyncio.fixture
async def mcp_storefront(monkeypatch, storefront):
    await storefront.init()
    monkeypatch.setattr(server, "storefront", storefront, raising=False)
    attach_host(storefront)
    return storefront


async def call(name, arguments=None) -> str:
    [content] = await server.call_tool(name, arguments or {})
    return content.text


@pytest.mark.asyncio
async def test_list_tools_names():
    names = {tool.name for tool in await server.list_tools()}

    assert "storefront_submit_order" in names
    assert "storefront_toggle_basket" in names


@pytest.mark.asyncio
async def test_list_products(mcp_storefront):
    text = await call("storefront_list_products")

    assert "Found 2 product(s)" in text
    assert "Price: 100 synapses" in text
    assert "Price: Priceless" in text


@pytest.mark.asyncio
async def test_get_product_selects_it(mcp_storefront):
    text = await call("storefront_get_product", {"product_id": "p-free"})

    assert "This product is not for sale" in text
    assert mcp_storefront.catalog.get_selected_product().id == "p-free"


@pytest.mark.asyncio
async def test_basket_tools(mcp_storefront):
    text = await call("storefront_add_to_basket", {"product_id": "p-100"})
    assert "Total: 100 synapses" in text

    text = await call("storefront_add_to_basket", {"product_id": "missing"})
    assert text == "Product missing not found"

    await call("storefront_toggle_basket", {"product_id": "p-100"})
    assert await call("storefront_get_basket") == "Your basket is empty"


@pytest.mark.asyncio
async def test_checkout_flow(mcp_storefront, fake_api):
    fake_api.order_id = "X"
    await call("storefront_add_to_basket", {"product_id": "p-100"})
    await call("storefront_add_to_basket", {"product_id": "p-free"})

    text = await call("storefront_update_order", {"payment": "card", "address": "A"})
    assert text == "Payment and address: complete"

    text = await call("storefront_submit_order", {"email": "a@b.co", "phone": VALID_PHONE})

    assert "Order ID: X" in text
    assert "Total: 100 synapses" in text
    assert mcp_storefront.basket.count == 0


@pytest.mark.asyncio
async def test_submit_with_bad_phone_reports_field(mcp_storefront, fake_api):
    await call("storefront_add_to_basket", {"product_id": "p-100"})
    await call("storefront_update_order", {"payment": "cash", "address": "A"})

    text = await call("storefront_submit_order", {"email": "a@b.co", "phone": "000"})

    assert text.startswith("Order failed")
    assert "phone: Enter a valid phone number" in text
    assert fake_api.created_orders == []


@pytest.mark.asyncio
async def test_submit_reports_unexpected_backend_failure(mcp_storefront, fake_api):
    fake_api.order_error = RuntimeError("connection reset")
    await call("storefront_add_to_basket", {"product_id": "p-100"})
    await call("storefront_update_order", {"payment": "cash", "address": "A"})

    text = await call("storefront_submit_order", {"email": "a@b.co", "phone": VALID_PHONE})

    assert text == "Order failed: connection reset"
    assert mcp_storefront.basket.count == 1


@pytest.mark.asyncio
async def test_reset_order(mcp_storefront):
    await call("storefront_update_order", {"payment": "cash", "address": "A"})

    await call("storefront_reset_order")

    assert mcp_storefront.order.payment is None


@pytest.mark.asyncio
async def test_checkout_after_reset_keeps_basket(mcp_storefront, fake_api):
    await call("storefront_add_to_basket", {"product_id": "p-100"})
    await call("storefront_reset_order")
    await call("storefront_update_order", {"payment": "cash", "address": "A"})

    text = await call("storefront_submit_order", {"email": "a@b.co", "phone": VALID_PHONE})

    assert "Order ID: order-1" in text
    assert len(fake_api.created_orders) == 1


@pytest.mark.asyncio
async def test_unknown_tool(mcp_storefront):
    assert await call("storefront_nope") == "Unknown tool: storefront_nope"


@pytest.mark.asyncio
async def test_read_basket_resource(mcp_storefront):
    await call("storefront_add_to_basket", {"product_id": "p-100"})

    data = json.loads(await server.read_resource(AnyUrl("storefront://basket")))

    assert data["count"] == 1
    assert data["items"][0]["id"] == "p-100"
    assert data["total_label"] == "100 synapses"
