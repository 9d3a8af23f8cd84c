"""
Outcome log: one immutable emailLog document per dispatch attempt.

Writes are best-effort. A failed write is reported on the operational log and
swallowed so that delivery results never depend on audit-log availability.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import EmailLogEntry
    from .store import DocumentStore

log = logging.getLogger("tourmail.email_log")

COLLECTION = "emailLog"


class EmailLog:
    """Append-only audit log of dispatch attempts."""

    def __init__(self, store: "DocumentStore") -> None:
        self._store = store

    def record(self, entry: "EmailLogEntry") -> str | None:
        """Append an entry. Returns its id, or None if the write failed."""
        try:
            return self._store.add(COLLECTION, entry.model_dump(mode="json", exclude={"id"}))
        except Exception:
            log.error("Failed to log email  recipient=%s template=%s status=%s",
                      entry.recipient, entry.template_id, entry.status, exc_info=True)
            return None

    def recent(
        self,
        limit: int = 100,
        status: str | None = None,
        trigger_id: str | None = None,
    ) -> "list[EmailLogEntry]":
        """Newest entries first, optionally filtered."""
        from .models import EmailLogEntry

        filters = {}
        if status is not None:
            filters["status"] = status
        if trigger_id is not None:
            filters["trigger_id"] = trigger_id

        entries = [
            EmailLogEntry.model_validate({**data, "id": doc_id})
            for doc_id, data in self._store.query(COLLECTION, **filters)
        ]
        entries.sort(key=lambda e: e.sent_at, reverse=True)
        return entries[:limit]
