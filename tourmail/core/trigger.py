"""
Trigger registry.

Triggers bind a document-store event on a watched collection to a template.
Admins create, edit, enable/disable and delete them; the event processor only
reads them and bumps their usage statistics.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .errors import TriggerNotFoundError

if TYPE_CHECKING:
    from .models import EmailTrigger
    from .store import DocumentStore

log = logging.getLogger("tourmail.trigger")

COLLECTION = "emailTriggers"

# Owned by the event processor; admin saves never overwrite them
_STAT_FIELDS = ("last_triggered", "send_count")


class TriggerRegistry:
    """Holds trigger definitions and answers "enabled triggers for (collection, event)"."""

    def __init__(self, store: "DocumentStore") -> None:
        self._store = store

    def _from_doc(self, doc_id: str, data: dict) -> "EmailTrigger":
        from .models import EmailTrigger
        return EmailTrigger.model_validate({**data, "id": doc_id})

    def load(self, trigger_id: str) -> "EmailTrigger":
        data = self._store.get(COLLECTION, trigger_id)
        if data is None:
            raise TriggerNotFoundError(trigger_id)
        return self._from_doc(trigger_id, data)

    def list(self) -> "list[EmailTrigger]":
        triggers = []
        for doc_id, data in self._store.list(COLLECTION):
            try:
                triggers.append(self._from_doc(doc_id, data))
            except ValueError as e:
                log.warning("Failed to load trigger %s: %s", doc_id, e)
        return sorted(triggers, key=lambda t: t.name)

    def find_enabled(self, collection: str, event: str) -> "list[EmailTrigger]":
        """Enabled triggers watching (collection, event), in store order."""
        triggers = []
        docs = self._store.query(COLLECTION, collection=collection, event=event, enabled=True)
        for doc_id, data in docs:
            try:
                triggers.append(self._from_doc(doc_id, data))
            except ValueError as e:
                log.warning("Skipping invalid trigger %s: %s", doc_id, e)
        return triggers

    def save(self, trigger: "EmailTrigger") -> "EmailTrigger":
        """Create or replace a trigger definition, keeping existing usage statistics."""
        data = trigger.model_dump(mode="json", exclude={"id"})
        existing = self._store.get(COLLECTION, trigger.id)
        if existing is not None:
            for key in _STAT_FIELDS:
                data[key] = existing.get(key, data[key])
        self._store.set(COLLECTION, trigger.id, data)
        log.info("Saved  trigger=%s enabled=%s", trigger.id, trigger.enabled)
        return self._from_doc(trigger.id, data)

    def set_enabled(self, trigger_id: str, enabled: bool) -> "EmailTrigger":
        if self._store.get(COLLECTION, trigger_id) is None:
            raise TriggerNotFoundError(trigger_id)
        data = self._store.update(COLLECTION, trigger_id, {"enabled": enabled})
        log.info("%s  trigger=%s", "Enabled" if enabled else "Disabled", trigger_id)
        return self._from_doc(trigger_id, data)

    def delete(self, trigger_id: str) -> None:
        if self._store.get(COLLECTION, trigger_id) is None:
            raise TriggerNotFoundError(trigger_id)
        self._store.delete(COLLECTION, trigger_id)
        log.info("Deleted  trigger=%s", trigger_id)

    def record_send(self, trigger_id: str, at: datetime | None = None) -> None:
        """Bump send_count and stamp last_triggered in one store-level operation."""
        when = at or datetime.now(timezone.utc)
        self._store.increment(
            COLLECTION, trigger_id, "send_count", 1,
            last_triggered=when.isoformat(),
        )
