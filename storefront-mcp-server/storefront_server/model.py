"""Base class for state-owning domain models."""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from .bus import EventBus

StateT = TypeVar("StateT")


class Model(ABC, Generic[StateT]):
    """
    Holds one state value and a handle on the shared event bus.

    The state is exposed read-only; subclasses replace it as a whole through
    ``_set_data`` and announce every change on the bus with a computed
    snapshot rather than the raw state.
    """

    def __init__(self, events: EventBus) -> None:
        self.events = events
        self._data: StateT = self.initial_data()

    @abstractmethod
    def initial_data(self) -> StateT:
        """Return the state a freshly built model starts with."""

    @property
    def data(self) -> StateT:
        return self._data

    def get_data(self) -> StateT:
        return self._data

    def _set_data(self, data: StateT) -> None:
        self._data = data

    def emit(self, event_name: str, payload: Any = None) -> None:
        self.events.emit(event_name, payload)
