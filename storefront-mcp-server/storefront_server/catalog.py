"""Catalog model: product list, loading flag and selection."""

import logging
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from . import events
from .bus import EventBus
from .config import Settings
from .model import Model
from .models import CategoryBucket, Product, ProductViewModel
from .shop_client import ShopApi

logger = logging.getLogger(__name__)

# Raw category names as the shop API sends them, plus their English spellings.
CATEGORY_BUCKETS = {
    "софт-скил": CategoryBucket.SOFTSKILL,
    "soft-skill": CategoryBucket.SOFTSKILL,
    "другое": CategoryBucket.OTHER,
    "other": CategoryBucket.OTHER,
    "кнопка": CategoryBucket.BUTTON,
    "button": CategoryBucket.BUTTON,
    "доп": CategoryBucket.ADDON,
    "additional": CategoryBucket.ADDON,
}


def category_bucket(category: Optional[str]) -> CategoryBucket:
    """Fold a raw category into a display bucket; unknown ones become ``other``."""
    if category is None:
        return CategoryBucket.OTHER
    return CATEGORY_BUCKETS.get(category.strip().lower(), CategoryBucket.OTHER)


def format_price(price: Optional[Decimal], settings: Settings) -> str:
    if price is None:
        return settings.priceless_label
    return f"{price} {settings.currency}"


class CatalogState(BaseModel):
    model_config = ConfigDict(frozen=True)

    products: tuple[Product, ...] = ()
    is_loading: bool = False
    selected_product_id: Optional[str] = None


class CatalogModel(Model[CatalogState]):
    """Owns the product list loaded from the shop API."""

    def __init__(
        self, events: EventBus, api: ShopApi, settings: Optional[Settings] = None
    ) -> None:
        super().__init__(events)
        self.api = api
        self.settings = settings or Settings.from_env()

    def initial_data(self) -> CatalogState:
        return CatalogState()

    async def load(self) -> bool:
        """
        Load products from the shop API.

        Emits ``catalog:load`` before the request and either ``catalog:loaded``
        or ``catalog:error`` after it. Remote failures never escape.

        Returns:
            True if the catalog was replaced, False on failure
        """
        self._set_data(self.data.model_copy(update={"is_loading": True}))
        self.emit(events.CATALOG_LOAD)

        try:
            response = await self.api.get_products()
        except Exception as e:
            logger.warning(f"Catalog load failed: {e}")
            self._set_data(self.data.model_copy(update={"is_loading": False}))
            self.emit(events.CATALOG_ERROR, events.ErrorMessage(message=str(e) or "Failed to load catalog"))
            return False

        products = tuple(response.items)
        self._set_data(self.data.model_copy(update={"products": products, "is_loading": False}))
        logger.info(f"Catalog loaded: {len(products)} products")
        self.emit(events.CATALOG_LOADED, events.CatalogLoaded(products=list(products)))
        return True

    def select_product(self, product_id: str) -> None:
        self._set_data(self.data.model_copy(update={"selected_product_id": product_id}))

    def get_selected_product(self) -> Optional[Product]:
        if self.data.selected_product_id is None:
            return None
        return self.get_product_by_id(self.data.selected_product_id)

    def get_products(self) -> list[Product]:
        return list(self.data.products)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.data.products if p.id == product_id), None)

    def is_loading(self) -> bool:
        return self.data.is_loading

    def to_product_view_model(self, product: Product) -> ProductViewModel:
        """Build the display projection shared by catalog cards and previews."""
        if product.image:
            image_url = f"{self.settings.cdn_url.rstrip('/')}/{product.image.lstrip('/')}"
        else:
            image_url = self.settings.placeholder_image

        return ProductViewModel(
            id=product.id,
            title=product.title,
            category_label=product.category or CategoryBucket.OTHER.value,
            category_class=category_bucket(product.category),
            image_url=image_url,
            price_label=format_price(product.price, self.settings),
            is_buyable=product.is_buyable,
        )

    def get_all_product_view_models(self) -> list[ProductViewModel]:
        return [self.to_product_view_model(p) for p in self.data.products]
