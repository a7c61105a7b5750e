"""Order model: the checkout draft and its step-wise validation.

Checkout has two screens. The shipping step collects payment and address,
the contact step collects email and phone. Each setter re-emits
``order:changed`` with the draft and the validation result for the screen
the edited fields belong to.
"""

import logging
import re
from typing import Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from . import events
from .basket import basket_total
from .exceptions import OrderIncompleteError
from .model import Model
from .models import BasketItem, OrderField, OrderRequest, PaymentMethod, ValidationResult

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+7\s?\(\d{3}\)\s?\d{3}-\d{2}-\d{2}$")

ERROR_MESSAGES: dict[OrderField, str] = {
    "payment": "Choose a payment method",
    "address": "Enter a delivery address",
    "email": "Enter a valid email",
    "phone": "Enter a valid phone number",
}

# The backend accepts "online" where the form offers "card".
BACKEND_PAYMENT = {
    PaymentMethod.CARD: PaymentMethod.ONLINE,
    PaymentMethod.CASH: PaymentMethod.CASH,
    PaymentMethod.ONLINE: PaymentMethod.ONLINE,
}


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_RE.match(email.strip()) is not None


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_RE.match(phone.strip()) is not None


class OrderDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment: Optional[PaymentMethod] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderModel(Model[OrderDraft]):
    """Owns the in-progress order draft."""

    _basket_items: tuple[BasketItem, ...] = ()

    def initial_data(self) -> OrderDraft:
        return OrderDraft()

    def set_payment(self, method: Union[PaymentMethod, str]) -> None:
        self._set_data(self.data.model_copy(update={"payment": PaymentMethod(method)}))
        self._emit_changed("order")

    def set_address(self, value: str) -> None:
        self._set_data(self.data.model_copy(update={"address": value}))
        self._emit_changed("order")

    def set_contacts(self, email: Optional[str] = None, phone: Optional[str] = None) -> None:
        """Update whichever contact fields are given; ``None`` keeps the current value."""
        update = {}
        if email is not None:
            update["email"] = email
        if phone is not None:
            update["phone"] = phone
        self._set_data(self.data.model_copy(update=update))
        self._emit_changed("full")

    def reset(self) -> None:
        """Return the draft fields to their empty state; the basket snapshot is kept."""
        self._set_data(self.initial_data())
        logger.info("Order draft reset")
        self._emit_changed("order")

    def attach_basket(self, items: Iterable[BasketItem]) -> None:
        """Keep a snapshot of the basket for the request total and item list."""
        self._basket_items = tuple(items)

    @property
    def basket_items(self) -> tuple[BasketItem, ...]:
        return self._basket_items

    @property
    def payment(self) -> Optional[PaymentMethod]:
        return self.data.payment

    @property
    def address(self) -> Optional[str]:
        return self.data.address

    @property
    def email(self) -> Optional[str]:
        return self.data.email

    @property
    def phone(self) -> Optional[str]:
        return self.data.phone

    def validate_order_step(self) -> ValidationResult:
        """Validate payment and address only."""
        errors: dict[OrderField, str] = {}
        if self.data.payment is None:
            errors["payment"] = ERROR_MESSAGES["payment"]
        if not self.data.address or not self.data.address.strip():
            errors["address"] = ERROR_MESSAGES["address"]
        return ValidationResult(valid=not errors, errors=errors)

    def validate_contacts_step(self) -> ValidationResult:
        """Validate email and phone only."""
        errors: dict[OrderField, str] = {}
        if not is_valid_email(self.data.email):
            errors["email"] = ERROR_MESSAGES["email"]
        if not is_valid_phone(self.data.phone):
            errors["phone"] = ERROR_MESSAGES["phone"]
        return ValidationResult(valid=not errors, errors=errors)

    def validate(self) -> ValidationResult:
        errors = {
            **self.validate_order_step().errors,
            **self.validate_contacts_step().errors,
        }
        return ValidationResult(valid=not errors, errors=errors)

    def to_request(self) -> OrderRequest:
        """
        Build the payload for the shop's order endpoint.

        Returns:
            OrderRequest with payment remapped for the backend

        Raises:
            OrderIncompleteError: If a draft field is unset or no items are attached
        """
        draft = self.data
        missing = [
            name
            for name in ("payment", "address", "email", "phone")
            if getattr(draft, name) is None
        ]
        if not self._basket_items:
            missing.append("items")
        if missing:
            raise OrderIncompleteError(missing)

        return OrderRequest(
            items=[item.product.id for item in self._basket_items],
            payment=BACKEND_PAYMENT[draft.payment],
            address=draft.address.strip(),
            email=draft.email.strip(),
            phone=draft.phone.strip(),
            total=basket_total(self._basket_items),
        )

    to_request_dto = to_request

    def _emit_changed(self, scope: Literal["order", "full"]) -> None:
        validation = self.validate_order_step() if scope == "order" else self.validate()
        self.emit(
            events.ORDER_CHANGED,
            events.OrderChanged(
                **self.data.model_dump(),
                valid=validation.valid,
                errors=validation.errors,
                scope=scope,
            ),
        )
