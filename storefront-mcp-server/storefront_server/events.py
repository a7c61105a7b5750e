"""Event names and their payload types.

User-originated edits and model notifications use distinct names:
``order:update`` and ``contacts:update`` carry what the user typed,
``order:changed`` carries the model's draft plus its validation result.
"""

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import BasketItem, OrderField, PaymentMethod, Product

APP_READY = "app:ready"
APP_ERROR = "app:error"

CATALOG_LOAD = "catalog:load"
CATALOG_LOADED = "catalog:loaded"
CATALOG_ERROR = "catalog:error"

CARD_SELECT = "card:select"
CARD_ADD_TO_BASKET = "card:add-to-basket"
CARD_TOGGLE_BASKET = "card:toggle-basket"

BASKET_REMOVE = "basket:remove"
BASKET_OPEN = "basket:open"
BASKET_CHANGED = "basket:changed"

ORDER_OPEN = "order:open"
ORDER_UPDATE = "order:update"
ORDER_CHANGED = "order:changed"
ORDER_SUBMIT = "order:submit"
ORDER_SUCCESS = "order:success"
ORDER_ERROR = "order:error"

CONTACTS_UPDATE = "contacts:update"
CONTACTS_SUBMIT = "contacts:submit"

MODAL_OPEN = "modal:open"
MODAL_CLOSE = "modal:close"


class ErrorMessage(BaseModel):
    """Payload of ``app:error`` and ``catalog:error``."""

    message: str


class CatalogLoaded(BaseModel):
    products: list[Product]


class ProductAction(BaseModel):
    """Payload of card and basket events that refer to one product."""

    id: str


class BasketChanged(BaseModel):
    items: list[BasketItem]
    count: int
    total: Decimal


class OrderUpdate(BaseModel):
    """Shipping or contact fields edited by the user."""

    model_config = ConfigDict(extra="forbid")

    payment: Optional[PaymentMethod] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ContactsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: Optional[str] = None
    phone: Optional[str] = None


class ContactsSubmit(BaseModel):
    email: str
    phone: str


class OrderChanged(BaseModel):
    """Draft snapshot emitted by the order model after every change.

    ``scope`` tells which validation produced ``valid`` and ``errors``:
    ``order`` for the shipping step, ``full`` for the whole draft.
    """

    payment: Optional[PaymentMethod] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    valid: bool
    errors: dict[OrderField, str] = Field(default_factory=dict)
    scope: Literal["order", "full"]


class OrderSuccess(BaseModel):
    order_id: str
    total: Decimal


class OrderError(BaseModel):
    message: str
    errors: dict[OrderField, str] = Field(default_factory=dict)
