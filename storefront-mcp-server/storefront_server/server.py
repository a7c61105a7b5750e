"""MCP Server for the storefront."""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from . import events
from .app_state import AppState, create_storefront
from .config import Settings
from .models import PaymentMethod
from .views import attach_host

logger = logging.getLogger("storefront-mcp-server")

# Initialize server
app = Server("storefront-mcp-server")

# Global state
storefront: AppState


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def render_basket() -> str:
    basket = storefront.basket
    if not basket.count:
        return "Your basket is empty"

    result_lines = [f"Basket ({basket.count} items):\n"]
    for item in basket.to_basket_item_view_models():
        result_lines.append(f"{item.index}. {item.title}")
        result_lines.append(f"   Product ID: {item.id}")
        result_lines.append(f"   Price: {item.price_label}")

    result_lines.append(f"\n{'='*50}")
    result_lines.append(f"Total: {basket.total_label}")
    return "\n".join(result_lines)


def render_validation(title: str, valid: bool, errors: dict[str, str]) -> str:
    if valid:
        return f"{title}: complete"
    lines = [f"{title}: incomplete"]
    lines.extend(f"   {field}: {message}" for field, message in errors.items())
    return "\n".join(lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("storefront://catalog"),
            name="Catalog",
            mimeType="application/json",
            description="Products available in the store",
        ),
        Resource(
            uri=AnyUrl("storefront://basket"),
            name="Basket",
            mimeType="application/json",
            description="Current basket contents and total",
        ),
        Resource(
            uri=AnyUrl("storefront://order"),
            name="Order draft",
            mimeType="application/json",
            description="Checkout draft and its validation state",
        ),
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "storefront://catalog":
        products = storefront.catalog.get_all_product_view_models()
        return json.dumps([p.model_dump(mode="json") for p in products], indent=2)

    elif uri_str == "storefront://basket":
        basket = storefront.basket
        return json.dumps(
            {
                "items": [i.model_dump(mode="json") for i in basket.to_basket_item_view_models()],
                "count": basket.count,
                "total": str(basket.total),
                "total_label": basket.total_label,
            },
            indent=2,
        )

    elif uri_str == "storefront://order":
        order = storefront.order
        return json.dumps(
            {
                "draft": order.data.model_dump(mode="json"),
                "validation": order.validate().model_dump(mode="json"),
            },
            indent=2,
        )

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    product_id_schema = {
        "type": "object",
        "properties": {
            "product_id": {
                "type": "string",
                "description": "Product ID",
            },
        },
        "required": ["product_id"],
    }
    return [
        Tool(
            name="storefront_list_products",
            description="List all products in the catalog with prices and categories",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_get_product",
            description="Show a single product in detail",
            inputSchema=product_id_schema,
        ),
        Tool(
            name="storefront_add_to_basket",
            description="Add a product to the basket (a product can be in the basket only once)",
            inputSchema=product_id_schema,
        ),
        Tool(
            name="storefront_remove_from_basket",
            description="Remove a product from the basket",
            inputSchema=product_id_schema,
        ),
        Tool(
            name="storefront_toggle_basket",
            description="Add the product if it is not in the basket, otherwise remove it",
            inputSchema=product_id_schema,
        ),
        Tool(
            name="storefront_get_basket",
            description="Get current basket contents with total",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_update_order",
            description="Set payment method and/or delivery address for the order",
            inputSchema={
                "type": "object",
                "properties": {
                    "payment": {
                        "type": "string",
                        "enum": [m.value for m in PaymentMethod],
                        "description": "Payment method",
                    },
                    "address": {
                        "type": "string",
                        "description": "Delivery address",
                    },
                },
            },
        ),
        Tool(
            name="storefront_update_contacts",
            description="Set email and/or phone for the order",
            inputSchema={
                "type": "object",
                "properties": {
                    "email": {"type": "string", "description": "Email address"},
                    "phone": {
                        "type": "string",
                        "description": "Phone in the form +7 (XXX) XXX-XX-XX",
                    },
                },
            },
        ),
        Tool(
            name="storefront_submit_order",
            description="Submit the order with the given contacts",
            inputSchema={
                "type": "object",
                "properties": {
                    "email": {"type": "string", "description": "Email address"},
                    "phone": {
                        "type": "string",
                        "description": "Phone in the form +7 (XXX) XXX-XX-XX",
                    },
                },
                "required": ["email", "phone"],
            },
        ),
        Tool(
            name="storefront_reset_order",
            description="Discard the order draft",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "storefront_list_products":
            products = storefront.catalog.get_all_product_view_models()
            if not products:
                return _text("The catalog is empty")

            result_lines = [f"Found {len(products)} product(s):\n"]
            for i, product in enumerate(products, 1):
                in_basket = storefront.basket.is_in_basket(product.id)
                result_lines.append(f"\n{i}. {product.title}")
                result_lines.append(f"   ID: {product.id}")
                result_lines.append(f"   Category: {product.category_label}")
                result_lines.append(f"   Price: {product.price_label}")
                if in_basket:
                    result_lines.append("   In basket")

            return _text("\n".join(result_lines))

        elif name == "storefront_get_product":
            product_id = arguments["product_id"]
            storefront.events.emit(events.CARD_SELECT, events.ProductAction(id=product_id))

            product = storefront.catalog.get_selected_product()
            if product is None:
                return _text(f"Product {product_id} not found")

            view = storefront.catalog.to_product_view_model(product)
            result_lines = [view.title, f"ID: {view.id}", f"Category: {view.category_label}"]
            if product.description:
                result_lines.append(f"Description: {product.description}")
            result_lines.append(f"Price: {view.price_label}")
            result_lines.append(f"Image: {view.image_url}")
            if not view.is_buyable:
                result_lines.append("This product is not for sale")
            return _text("\n".join(result_lines))

        elif name == "storefront_add_to_basket":
            product_id = arguments["product_id"]
            if storefront.catalog.get_product_by_id(product_id) is None:
                return _text(f"Product {product_id} not found")

            storefront.events.emit(events.CARD_ADD_TO_BASKET, events.ProductAction(id=product_id))
            return _text(f"Added product {product_id} to basket\n\n{render_basket()}")

        elif name == "storefront_remove_from_basket":
            product_id = arguments["product_id"]
            storefront.events.emit(events.BASKET_REMOVE, events.ProductAction(id=product_id))
            return _text(f"Removed product {product_id} from basket\n\n{render_basket()}")

        elif name == "storefront_toggle_basket":
            product_id = arguments["product_id"]
            if storefront.catalog.get_product_by_id(product_id) is None:
                return _text(f"Product {product_id} not found")

            storefront.events.emit(events.CARD_TOGGLE_BASKET, events.ProductAction(id=product_id))
            return _text(render_basket())

        elif name == "storefront_get_basket":
            return _text(render_basket())

        elif name == "storefront_update_order":
            update = events.OrderUpdate(
                payment=arguments.get("payment"), address=arguments.get("address")
            )
            storefront.events.emit(events.ORDER_UPDATE, update)

            result = storefront.order.validate_order_step()
            return _text(render_validation("Payment and address", result.valid, result.errors))

        elif name == "storefront_update_contacts":
            update = events.ContactsUpdate(
                email=arguments.get("email"), phone=arguments.get("phone")
            )
            storefront.events.emit(events.CONTACTS_UPDATE, update)

            result = storefront.order.validate_contacts_step()
            return _text(render_validation("Contacts", result.valid, result.errors))

        elif name == "storefront_submit_order":
            outcome = await storefront.submit_order(
                events.ContactsSubmit(email=arguments["email"], phone=arguments["phone"])
            )
            if isinstance(outcome, events.OrderSuccess):
                return _text(
                    f"Order placed!\nOrder ID: {outcome.order_id}\n"
                    f"Total: {outcome.total} {storefront.catalog.settings.currency}"
                )
            text = f"Order failed: {outcome.message}"
            if outcome.errors:
                text += "\n" + "\n".join(
                    f"   {field}: {message}" for field, message in outcome.errors.items()
                )
            return _text(text)

        elif name == "storefront_reset_order":
            storefront.events.emit(events.MODAL_CLOSE)
            return _text("Order draft cleared")

        else:
            return _text(f"Unknown tool: {name}")

    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return _text(f"Error: {str(e)}")


async def main() -> None:
    """Main entry point for the MCP server."""
    global storefront

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    storefront = create_storefront(settings)
    attach_host(storefront)

    logger.info(f"Loading catalog from {settings.api_url}...")
    await storefront.init()

    logger.info("Starting Storefront MCP Server...")

    # Import and run the server
    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await storefront.close()


if __name__ == "__main__":
    asyncio.run(main())
