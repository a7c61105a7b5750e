"""Runtime configuration loaded from environment variables."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

DEFAULT_API_ORIGIN = "https://larek-api.nomoreparties.co"


class Settings(BaseModel):
    """Storefront settings."""

    api_url: str = Field(description="Base URL of the shop API")
    cdn_url: str = Field(description="Origin prefixed to product image paths")
    currency: str = Field(default="synapses", description="Currency unit shown in price labels")
    priceless_label: str = Field(default="Priceless", description="Label for products without a price")
    placeholder_image: str = Field(
        default="/images/Subtract.svg", description="Image shown for products without one"
    )
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    log_level: str = Field(default="INFO", description="Logging level name")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from ``STOREFRONT_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ

        origin = env.get("STOREFRONT_API_ORIGIN", DEFAULT_API_ORIGIN).rstrip("/")
        return cls(
            api_url=env.get("STOREFRONT_API_URL", f"{origin}/api/weblarek"),
            cdn_url=env.get("STOREFRONT_CDN_URL", f"{origin}/content/weblarek"),
            currency=env.get("STOREFRONT_CURRENCY", "synapses"),
            timeout=float(env.get("STOREFRONT_TIMEOUT", "30")),
            log_level=env.get("STOREFRONT_LOG_LEVEL", "INFO").upper(),
        )
