"""Host-side glue shared by the MCP and HTTP front ends."""

import logging
import re
from typing import Any

from . import events
from .app_state import AppState
from .bus import BusEvent

logger = logging.getLogger(__name__)

ORDER_OUTCOME = re.compile(r"^order:(success|error)$")


def log_event(event: BusEvent) -> None:
    logger.debug(f"[bus] {event.event_name}: {event.data!r}")


def log_order_outcome(payload: Any) -> None:
    if isinstance(payload, events.OrderSuccess):
        logger.info(f"Order {payload.order_id} placed, total {payload.total}")
    elif isinstance(payload, events.OrderError):
        logger.info(f"Order rejected: {payload.message}")


def attach_host(state: AppState) -> None:
    """
    Subscribe the front end to the storefront bus.

    Closing the checkout dialog discards the draft, every emission is
    logged for diagnostics and order outcomes are logged at INFO.
    """
    state.events.on(events.MODAL_CLOSE, lambda _: state.order.reset())
    state.events.on_all(log_event)
    state.events.on(ORDER_OUTCOME, log_order_outcome)
