"""HTTP server for the storefront."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__, events
from .app_state import AppState, create_storefront
from .config import Settings
from .models import PaymentMethod
from .views import attach_host

logger = logging.getLogger("storefront-http-server")

# Global state
storefront: AppState


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global storefront

    # Startup
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting Storefront HTTP Server...")

    storefront = create_storefront(settings)
    attach_host(storefront)
    await storefront.init()

    yield

    # Shutdown
    logger.info("Shutting down Storefront HTTP Server...")
    await storefront.close()


app = FastAPI(
    title="Storefront MCP Server",
    description="HTTP API for browsing the catalog, filling the basket and checking out",
    version=__version__,
    lifespan=lifespan,
)


# Request Models
class ProductRequest(BaseModel):
    product_id: str


class OrderRequestBody(BaseModel):
    payment: Optional[PaymentMethod] = None
    address: Optional[str] = None


class ContactsRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class SubmitRequest(BaseModel):
    email: str
    phone: str


def basket_snapshot() -> dict:
    basket = storefront.basket
    return {
        "items": [item.model_dump() for item in basket.to_basket_item_view_models()],
        "count": basket.count,
        "total": basket.total,
        "total_label": basket.total_label,
    }


def require_product(product_id: str) -> None:
    if storefront.catalog.get_product_by_id(product_id) is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Storefront MCP Server",
        "version": __version__,
        "description": "HTTP API for browsing the catalog, filling the basket and checking out",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "products": {"list": "GET /products", "get": "GET /products/{product_id}"},
            "basket": {
                "get": "GET /basket",
                "add": "POST /basket/add",
                "remove": "POST /basket/remove",
                "toggle": "POST /basket/toggle",
            },
            "order": {
                "get": "GET /order",
                "update": "POST /order",
                "contacts": "POST /order/contacts",
                "submit": "POST /order/submit",
                "reset": "POST /order/reset",
            },
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "products": len(storefront.catalog.get_products()),
        "loading": storefront.catalog.is_loading(),
    }


# Product endpoints
@app.get("/products")
async def list_products():
    """List catalog products."""
    products = storefront.catalog.get_all_product_view_models()
    return {
        "count": len(products),
        "products": [
            {**p.model_dump(), "in_basket": storefront.basket.is_in_basket(p.id)} for p in products
        ],
    }


@app.get("/products/{product_id}")
async def get_product(product_id: str):
    """Select a product and return its details."""
    storefront.events.emit(events.CARD_SELECT, events.ProductAction(id=product_id))

    product = storefront.catalog.get_selected_product()
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

    return {
        **storefront.catalog.to_product_view_model(product).model_dump(),
        "description": product.description,
        "in_basket": storefront.basket.is_in_basket(product_id),
    }


# Basket endpoints
@app.get("/basket")
async def get_basket():
    """Get current basket."""
    return basket_snapshot()


@app.post("/basket/add")
async def add_to_basket(request: ProductRequest):
    """Add a product to the basket."""
    require_product(request.product_id)
    storefront.events.emit(events.CARD_ADD_TO_BASKET, events.ProductAction(id=request.product_id))
    return basket_snapshot()


@app.post("/basket/remove")
async def remove_from_basket(request: ProductRequest):
    """Remove a product from the basket."""
    storefront.events.emit(events.BASKET_REMOVE, events.ProductAction(id=request.product_id))
    return basket_snapshot()


@app.post("/basket/toggle")
async def toggle_basket(request: ProductRequest):
    """Add the product if absent, remove it otherwise."""
    require_product(request.product_id)
    storefront.events.emit(events.CARD_TOGGLE_BASKET, events.ProductAction(id=request.product_id))
    return basket_snapshot()


# Order endpoints
@app.get("/order")
async def get_order():
    """Get the order draft and its validation state."""
    return {
        "draft": storefront.order.data.model_dump(),
        "validation": storefront.order.validate().model_dump(),
    }


@app.post("/order")
async def update_order(request: OrderRequestBody):
    """Set payment method and/or address."""
    storefront.events.emit(
        events.ORDER_UPDATE, events.OrderUpdate(payment=request.payment, address=request.address)
    )
    return storefront.order.validate_order_step().model_dump()


@app.post("/order/contacts")
async def update_contacts(request: ContactsRequest):
    """Set email and/or phone."""
    storefront.events.emit(
        events.CONTACTS_UPDATE, events.ContactsUpdate(email=request.email, phone=request.phone)
    )
    return storefront.order.validate_contacts_step().model_dump()


@app.post("/order/submit")
async def submit_order(request: SubmitRequest):
    """Submit the order with the given contacts."""
    outcome = await storefront.submit_order(
        events.ContactsSubmit(email=request.email, phone=request.phone)
    )
    if isinstance(outcome, events.OrderSuccess):
        return {"success": True, "order_id": outcome.order_id, "total": outcome.total}
    if outcome.errors:
        raise HTTPException(
            status_code=422, detail={"message": outcome.message, "errors": outcome.errors}
        )
    raise HTTPException(status_code=502, detail=outcome.message)


@app.post("/order/reset")
async def reset_order():
    """Discard the order draft."""
    storefront.events.emit(events.MODAL_CLOSE)
    return {"success": True, "message": "Order draft cleared"}


def run_http_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the HTTP server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server()
