"""
Typed event channels.

One EventChannel per event kind replaces string-named events: the value
type each channel carries is part of its declaration.
"""

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    """
    Multi-callback sink for one kind of event.

    A failing callback is logged and skipped; the others still run.
    """

    def __init__(self, name: str):
        self.name = name
        self._callbacks: List[Callable[[T], None]] = []

    def add_callback(self, callback: Callable[[T], None]):
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[T], None]):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error in '{self.name}' callback: {e}")

    def __len__(self) -> int:
        return len(self._callbacks)

    def __repr__(self) -> str:
        return f"EventChannel({self.name!r}, callbacks={len(self._callbacks)})"
