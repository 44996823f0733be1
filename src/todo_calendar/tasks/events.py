# src/todo_calendar/tasks/events.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

logger = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    LOADED = "loaded"
    ADDED = "added"
    FAILED = "failed"
    EDITED = "edited"
    DELETED = "deleted"
    COMPLETED = "completed"
    ARCHIVED = "archived"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    kind: ChangeKind
    day: date | None = None


Listener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """
    Plain listener list used for reactive re-rendering.

    Listeners are called synchronously in subscription order.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def notify(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed kind=%s", event.kind.value)
