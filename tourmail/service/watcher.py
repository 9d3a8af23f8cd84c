"""Store change listener that forwards watched collection events to the queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.events import DocumentEvent
    from .queue import EventQueue

log = logging.getLogger("tourmail.watcher")

# Only creates and updates are delivered by the change feed
DELIVERED_EVENTS = frozenset({"create", "update"})


class CollectionWatcher:
    """Callable listener for DocumentStore.subscribe()."""

    def __init__(self, watched: "dict[str, list[str]]", queue: "EventQueue") -> None:
        self._watched = {
            name: frozenset(events) & DELIVERED_EVENTS for name, events in watched.items()
        }
        self._queue = queue

    def watches(self, collection: str, event: str) -> bool:
        return event in self._watched.get(collection, frozenset())

    def __call__(self, event: "DocumentEvent") -> None:
        if not self.watches(event.collection, event.event):
            log.debug("Ignored  collection=%s event=%s", event.collection, event.event)
            return
        self._queue.enqueue(event)
