"""Callback channels used to announce object storage changes."""
from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CallbackRegistry(Generic[T]):
    """Named list of subscribers notified synchronously, in subscription order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._callbacks: list[Callable[[T], None]] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def notify(self, item: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(item)
            except Exception as e:
                logger.error("Callback for '%s' failed: %s", self.name, e)
