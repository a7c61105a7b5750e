"""Basket model.

The basket is a set of distinct products kept in insertion order: adding a
product that is already present changes nothing, ``count`` is the number of
distinct products and ``total`` sums the prices of the priced ones.
"""

import logging
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from . import events
from .bus import EventBus
from .catalog import format_price
from .config import Settings
from .model import Model
from .models import BasketItem, BasketItemViewModel, Product

logger = logging.getLogger(__name__)


def basket_total(items: tuple[BasketItem, ...]) -> Decimal:
    """Sum prices over items that have one; priceless items count as zero."""
    return sum(
        (item.product.price for item in items if item.product.price is not None),
        Decimal("0"),
    )


class BasketState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[BasketItem, ...] = ()


class BasketModel(Model[BasketState]):
    """Owns basket contents and announces every change on ``basket:changed``."""

    def __init__(self, events: EventBus, settings: Optional[Settings] = None) -> None:
        super().__init__(events)
        self.settings = settings or Settings.from_env()

    def initial_data(self) -> BasketState:
        return BasketState()

    def add(self, product: Product) -> None:
        if self.is_in_basket(product.id):
            logger.debug(f"Product {product.id} already in basket")
        else:
            self._set_data(BasketState(items=self.data.items + (BasketItem(product=product),)))
            logger.info(f"Added product {product.id} to basket")
        self._emit_changed()

    def remove(self, product_id: str) -> None:
        items = tuple(item for item in self.data.items if item.product.id != product_id)
        if len(items) != len(self.data.items):
            logger.info(f"Removed product {product_id} from basket")
        self._set_data(BasketState(items=items))
        self._emit_changed()

    def toggle(self, product: Product) -> None:
        if self.is_in_basket(product.id):
            self.remove(product.id)
        else:
            self.add(product)

    def clear(self) -> None:
        self._set_data(BasketState())
        logger.info("Basket cleared")
        self._emit_changed()

    def is_in_basket(self, product_id: str) -> bool:
        return any(item.product.id == product_id for item in self.data.items)

    @property
    def items(self) -> tuple[BasketItem, ...]:
        return self.data.items

    @property
    def count(self) -> int:
        return len(self.data.items)

    @property
    def total(self) -> Decimal:
        return basket_total(self.data.items)

    @property
    def total_label(self) -> str:
        return f"{self.total} {self.settings.currency}"

    def to_basket_item_view_models(self) -> list[BasketItemViewModel]:
        return [
            BasketItemViewModel(
                id=item.product.id,
                title=item.product.title,
                price_label=format_price(item.product.price, self.settings),
                index=index,
            )
            for index, item in enumerate(self.data.items, 1)
        ]

    def _emit_changed(self) -> None:
        self.emit(
            events.BASKET_CHANGED,
            events.BasketChanged(items=list(self.items), count=self.count, total=self.total),
        )
