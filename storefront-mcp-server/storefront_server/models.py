"""Data models for storefront entities."""

from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

OrderField = Literal["payment", "address", "email", "phone"]


class PaymentMethod(str, Enum):
    """Payment methods accepted by the checkout form."""

    CARD = "card"
    CASH = "cash"
    ONLINE = "online"


class CategoryBucket(str, Enum):
    """Display buckets that product categories are folded into."""

    SOFTSKILL = "softskill"
    OTHER = "other"
    BUTTON = "button"
    ADDON = "addon"


class Product(BaseModel):
    """Represents a product from the shop catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Product ID")
    title: str = Field(description="Product title")
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, description="Raw category name")
    image: Optional[str] = Field(None, description="Image path relative to the CDN origin")
    price: Optional[Decimal] = Field(None, description="Price, None if not for sale")

    @property
    def is_buyable(self) -> bool:
        return self.price is not None


class ProductList(BaseModel):
    """Product list returned by the shop API."""

    total: int = Field(default=0, description="Number of products on the server")
    items: list[Product] = Field(default_factory=list, description="Products in server order")


class BasketItem(BaseModel):
    """Represents an item in the basket. Each product appears at most once."""

    model_config = ConfigDict(frozen=True)

    product: Product


class ValidationResult(BaseModel):
    """Outcome of validating some or all order fields."""

    valid: bool
    errors: dict[OrderField, str] = Field(default_factory=dict)


class OrderRequest(BaseModel):
    """Order payload sent to the shop API."""

    items: list[str] = Field(description="Product IDs")
    payment: PaymentMethod
    address: str
    email: str
    phone: str
    total: Decimal = Field(description="Sum of priced items")

    @field_serializer("total", when_used="json")
    def _total_as_number(self, total: Decimal) -> Union[int, float]:
        if total == total.to_integral_value():
            return int(total)
        return float(total)


class OrderResponse(BaseModel):
    """Order confirmation returned by the shop API."""

    id: str = Field(description="Order ID")
    total: Decimal = Field(description="Order total accepted by the server")


class ProductViewModel(BaseModel):
    """Display-ready projection of a product."""

    id: str
    title: str
    category_label: str
    category_class: CategoryBucket
    image_url: str
    price_label: str
    is_buyable: bool


class BasketItemViewModel(BaseModel):
    """Display-ready projection of a basket line."""

    id: str
    title: str
    price_label: str
    index: int = Field(ge=1, description="1-based position in the basket")
