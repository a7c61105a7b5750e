"""Application coordinator wiring the catalog, basket and order models."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from . import events
from .basket import BasketModel
from .bus import EventBus
from .catalog import CatalogModel
from .config import Settings
from .order import OrderModel
from .shop_client import ShopApi, ShopClient

logger = logging.getLogger(__name__)

OrderOutcome = Union[events.OrderSuccess, events.OrderError]


class AppState:
    """
    Subscribes once to the UI events and turns them into model calls.

    Models never talk to each other; every cross-model reaction lives here.
    """

    def __init__(
        self,
        events: EventBus,
        api: ShopApi,
        catalog: CatalogModel,
        basket: BasketModel,
        order: OrderModel,
    ) -> None:
        self.events = events
        self.api = api
        self.catalog = catalog
        self.basket = basket
        self.order = order
        self._tasks: set[asyncio.Task] = set()

        self._bind_events()

    async def init(self) -> None:
        """Load the catalog, then announce ``app:ready``."""
        await self.catalog.load()
        self.events.emit(events.APP_READY)

    async def submit_order(self, contacts: events.ContactsSubmit) -> OrderOutcome:
        """
        Record the contacts and send the order to the shop API.

        The outcome is emitted as ``order:success`` or ``order:error`` and
        also returned to the caller.

        Returns:
            OrderSuccess on confirmation, OrderError if validation or the request failed
        """
        self.order.set_contacts(email=contacts.email, phone=contacts.phone)

        validation = self.order.validate()
        if not validation.valid:
            logger.warning(f"Order not submitted, invalid fields: {sorted(validation.errors)}")
            return self._order_failed(
                events.OrderError(message="Order form is incomplete", errors=validation.errors)
            )

        try:
            request = self.order.to_request()
            response = await self.api.create_order(request)
        except Exception as e:
            logger.error(f"Order submission failed: {e}")
            return self._order_failed(events.OrderError(message=str(e) or "Failed to place order"))

        self.basket.clear()
        success = events.OrderSuccess(order_id=response.id, total=response.total)
        self.events.emit(events.ORDER_SUCCESS, success)
        return success

    def _order_failed(self, error: events.OrderError) -> events.OrderError:
        self.events.emit(events.ORDER_ERROR, error)
        return error

    async def drain(self) -> None:
        """Wait for order submissions started from ``contacts:submit``."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def close(self) -> None:
        await self.drain()
        aclose = getattr(self.api, "aclose", None)
        if aclose is not None:
            await aclose()

    def _bind_events(self) -> None:
        self.events.on(events.CARD_ADD_TO_BASKET, self._on_add_to_basket)
        self.events.on(events.CARD_TOGGLE_BASKET, self._on_toggle_basket)
        self.events.on(events.CARD_SELECT, self._on_select)
        self.events.on(events.BASKET_REMOVE, self._on_basket_remove)
        self.events.on(events.BASKET_CHANGED, self._on_basket_changed)
        self.events.on(events.ORDER_UPDATE, self._on_order_update)
        self.events.on(events.CONTACTS_UPDATE, self._on_contacts_update)
        self.events.on(events.CONTACTS_SUBMIT, self._on_contacts_submit)
        self.events.on(events.APP_ERROR, self._on_app_error)

    def _on_add_to_basket(self, payload: Any) -> None:
        action = events.ProductAction.model_validate(payload)
        product = self.catalog.get_product_by_id(action.id)
        if product is None:
            logger.debug(f"Ignoring add of unknown product {action.id}")
            return
        self.basket.add(product)

    def _on_toggle_basket(self, payload: Any) -> None:
        action = events.ProductAction.model_validate(payload)
        product = self.catalog.get_product_by_id(action.id)
        if product is None:
            logger.debug(f"Ignoring toggle of unknown product {action.id}")
            return
        self.basket.toggle(product)

    def _on_select(self, payload: Any) -> None:
        self.catalog.select_product(events.ProductAction.model_validate(payload).id)

    def _on_basket_remove(self, payload: Any) -> None:
        self.basket.remove(events.ProductAction.model_validate(payload).id)

    def _on_basket_changed(self, payload: Any) -> None:
        self.order.attach_basket(self.basket.items)

    def _on_order_update(self, payload: Any) -> None:
        # A validation snapshot is a notification, never an edit.
        if isinstance(payload, Mapping) and ("valid" in payload or "errors" in payload):
            logger.debug("Ignoring order:update payload carrying validation results")
            return
        try:
            update = events.OrderUpdate.model_validate(payload)
        except ValidationError:
            logger.debug(f"Ignoring malformed order:update payload: {payload!r}")
            return

        if update.payment is not None:
            self.order.set_payment(update.payment)
        if update.address is not None:
            self.order.set_address(update.address)
        if update.email is not None or update.phone is not None:
            self.order.set_contacts(email=update.email, phone=update.phone)

    def _on_contacts_update(self, payload: Any) -> None:
        update = events.ContactsUpdate.model_validate(payload)
        self.order.set_contacts(email=update.email, phone=update.phone)

    def _on_contacts_submit(self, payload: Any) -> None:
        contacts = events.ContactsSubmit.model_validate(payload)
        task = asyncio.get_running_loop().create_task(self.submit_order(contacts))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_app_error(self, payload: Any) -> None:
        error = events.ErrorMessage.model_validate(payload)
        logger.error(f"Application error: {error.message}")


def create_storefront(
    settings: Optional[Settings] = None, api: Optional[ShopApi] = None
) -> AppState:
    """
    Build the bus, models and coordinator.

    Args:
        settings: Storefront settings (defaults to the environment)
        api: Shop API implementation (defaults to an HTTP ShopClient)

    Returns:
        Wired AppState; call ``await state.init()`` to load the catalog
    """
    settings = settings or Settings.from_env()
    if api is None:
        api = ShopClient(settings.api_url, timeout=settings.timeout)

    bus = EventBus()
    return AppState(
        events=bus,
        api=api,
        catalog=CatalogModel(bus, api, settings),
        basket=BasketModel(bus, settings),
        order=OrderModel(bus),
    )
