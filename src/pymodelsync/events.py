"""Typed model notifications.

Each :class:`ModelEvent` kind owns its own observer list. Observers are
called synchronously, in subscription order, with the record concerned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

_logger = logging.getLogger(__name__)

Observer = Callable[[Any], None]


class ModelEvent(StrEnum):
    ADDED = "added"
    REMOVED = "removed"


class EventBus:
    """Observer lists keyed by event kind."""

    def __init__(self) -> None:
        self._observers: dict[ModelEvent, list[Observer]] = {kind: [] for kind in ModelEvent}

    def subscribe(self, kind: ModelEvent | str, observer: Observer) -> Callable[[], None]:
        """Register *observer* for *kind* and return a callable undoing it."""
        event = ModelEvent(kind)
        self._observers[event].append(observer)

        def _unsubscribe() -> None:
            self.unsubscribe(event, observer)

        return _unsubscribe

    def unsubscribe(self, kind: ModelEvent | str, observer: Observer) -> bool:
        observers = self._observers[ModelEvent(kind)]
        if observer in observers:
            observers.remove(observer)
            return True
        return False

    def emit(self, kind: ModelEvent, record: Any) -> None:
        for observer in tuple(self._observers[kind]):
            try:
                observer(record)
            except Exception:
                _logger.debug("%s observer failed", kind, exc_info=True)
