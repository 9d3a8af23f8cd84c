"""
Document change notifications for Tourmail.

The same DocumentEvent type is used everywhere:
- Emitted by DocumentStore implementations after a write
- Filtered by CollectionWatcher and queued on the EventQueue
- Consumed by EventProcessor and in tests
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class DocumentEvent(BaseModel):
    """One create/update of a document in a watched collection."""
    collection: str
    event: Literal["create", "update", "delete"]
    document_id: str
    data: dict[str, Any] = {}     # full field set after the write
