"""Observable state containers."""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
Listener = Callable[[S], None]


class Store(Generic[S]):
    """Holds a state snapshot and notifies subscribers after every change."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def get_state(self) -> S:
        raise NotImplementedError

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new state after each change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.get_state()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Store listener failed: {e}", exc_info=True)
