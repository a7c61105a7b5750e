"""Exception types raised by the storefront."""

from typing import Iterable, Optional


class StorefrontError(Exception):
    """Base class for storefront failures that are reported as error events."""


class ShopApiError(StorefrontError):
    """The remote shop API failed or returned an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OrderIncompleteError(StorefrontError):
    """An order request was built from a draft that is missing required data."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Order is incomplete, missing: {', '.join(self.missing)}")
