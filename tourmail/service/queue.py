"""
Change-event queue with a single background worker.

One event is processed at a time, so trigger dispatches from different
document changes never overlap. CollectionWatcher pushes DocumentEvents
onto this queue from the store change listener.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.events import DocumentEvent
    from .processor import EventProcessor

log = logging.getLogger("tourmail.queue")


class EventQueue:
    """Single-worker event queue."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue["DocumentEvent"] = asyncio.Queue()
        self._running = False

    def enqueue(self, event: "DocumentEvent") -> None:
        """Push a DocumentEvent onto the queue."""
        self._queue.put_nowait(event)
        log.info("Enqueued  collection=%s event=%s id=%s queue_depth=%d",
                 event.collection, event.event, event.document_id, self._queue.qsize())

    @property
    def depth(self) -> int:
        return self._queue.qsize()

    async def worker(self, processor: "EventProcessor") -> None:
        """
        Runs until stop(). Start once at server startup as an asyncio background task.
        """
        self._running = True
        log.info("Queue worker started")
        while self._running:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            try:
                await processor.process(event)
            except Exception as e:
                log.error("Worker error  collection=%s id=%s error=%s",
                          event.collection, event.document_id, e, exc_info=True)
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued event has been processed."""
        await self._queue.join()

    def stop(self) -> None:
        self._running = False
