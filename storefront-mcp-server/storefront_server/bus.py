"""In-process publish/subscribe event bus.

Handlers are plain callables invoked synchronously, in registration order,
on the emitting call stack. A handler may emit further events; the nested
dispatch completes before the outer one continues. Exceptions raised by a
handler are not caught here and propagate to whoever called ``emit``.

Subscriptions added or removed while an event is being dispatched take
effect from the next ``emit``: each dispatch walks a snapshot of the
registry taken when it started.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

EventName = Union[str, re.Pattern]
Handler = Callable[[Any], Any]


class BusEvent(BaseModel):
    """Envelope passed to catch-all listeners."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_name: str
    data: Any = None


def merge_payload(data: Any, context: Optional[Mapping[str, Any]]) -> Any:
    """Overlay ``context`` on ``data``, keeping the payload's own type."""
    if not context:
        return data
    if data is None:
        return dict(context)
    if isinstance(data, BaseModel):
        return data.model_copy(update=dict(context))
    if isinstance(data, Mapping):
        return {**data, **context}
    raise TypeError(f"Cannot merge context into payload of type {type(data).__name__}")


class EventBus:
    """Publish/subscribe dispatcher shared by the models and the view layer."""

    def __init__(self) -> None:
        self._subscriptions: list[tuple[EventName, Handler]] = []
        self._catch_all: list[Callable[[BusEvent], Any]] = []

    def on(self, event_name: EventName, handler: Handler) -> None:
        """
        Subscribe a handler.

        Args:
            event_name: Exact event name, or a compiled regex matching a family of names
            handler: Callable receiving the event payload
        """
        subscription = (event_name, handler)
        if subscription in self._subscriptions:
            return
        self._subscriptions.append(subscription)

    def off(self, event_name: EventName, handler: Handler) -> None:
        """Remove a subscription. Unknown subscriptions are ignored."""
        try:
            self._subscriptions.remove((event_name, handler))
        except ValueError:
            pass

    def emit(self, event_name: str, data: Any = None) -> None:
        """Deliver ``data`` to every handler subscribed to ``event_name``."""
        logger.debug(f"emit {event_name}")

        for pattern, handler in list(self._subscriptions):
            if self._matches(pattern, event_name):
                handler(data)

        if self._catch_all:
            envelope = BusEvent(event_name=event_name, data=data)
            for listener in list(self._catch_all):
                listener(envelope)

    def trigger(
        self, event_name: str, context: Optional[Mapping[str, Any]] = None
    ) -> Callable[..., None]:
        """
        Build a callback that emits ``event_name`` when called.

        Args:
            event_name: Event to emit
            context: Fields merged over the value the callback receives

        Returns:
            Callable taking an optional payload
        """

        def emit_event(data: Any = None) -> None:
            self.emit(event_name, merge_payload(data, context))

        return emit_event

    def on_all(self, listener: Callable[[BusEvent], Any]) -> None:
        """Subscribe a listener to every emitted event."""
        if listener not in self._catch_all:
            self._catch_all.append(listener)

    def off_all(self) -> None:
        """Remove all catch-all listeners. Per-event subscriptions are kept."""
        self._catch_all.clear()

    @staticmethod
    def _matches(pattern: EventName, event_name: str) -> bool:
        if isinstance(pattern, re.Pattern):
            return pattern.search(event_name) is not None
        return pattern == event_name
