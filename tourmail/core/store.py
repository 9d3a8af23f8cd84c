"""
DocumentStore ABC and implementations.

Documents are JSON-compatible dicts addressed by (collection, id).
MemoryDocumentStore: no disk I/O, use in tests.
FileDocumentStore: one JSON file per document under data/<collection>/<id>.json.

Writes that create or replace a document notify subscribed listeners with a
DocumentEvent, which is how the change feed learns about registrations.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from .events import DocumentEvent

log = logging.getLogger("tourmail.store")

Listener = Callable[["DocumentEvent"], None]


def _new_document_id() -> str:
    return uuid.uuid4().hex[:20]


class DocumentStore(ABC):
    """Persistence abstraction for collections of documents."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    # ── Primitives ────────────────────────────────────────────────────────────

    @abstractmethod
    def _read(self, collection: str, doc_id: str) -> "dict[str, Any] | None": ...

    @abstractmethod
    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None: ...

    @abstractmethod
    def _remove(self, collection: str, doc_id: str) -> bool: ...

    @abstractmethod
    def _ids(self, collection: str) -> list[str]: ...

    # ── Public API ────────────────────────────────────────────────────────────

    def get(self, collection: str, doc_id: str) -> "dict[str, Any] | None":
        return self._read(collection, doc_id)

    def list(self, collection: str) -> "list[tuple[str, dict[str, Any]]]":
        docs = []
        for doc_id in sorted(self._ids(collection)):
            data = self._read(collection, doc_id)
            if data is not None:
                docs.append((doc_id, data))
        return docs

    def query(self, collection: str, /, **equals: Any) -> "list[tuple[str, dict[str, Any]]]":
        """Documents whose fields equal every filter, ordered by id."""
        return [
            (doc_id, data) for doc_id, data in self.list(collection)
            if all(k in data and data[k] == v for k, v in equals.items())
        ]

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = _new_document_id()
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or replace a document."""
        with self._lock:
            existed = self._read(collection, doc_id) is not None
            self._write(collection, doc_id, data)
        self._notify(collection, "update" if existed else "create", doc_id, data)

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into an existing document. Raises KeyError if absent."""
        with self._lock:
            data = self._read(collection, doc_id)
            if data is None:
                raise KeyError(f"Document not found: {collection}/{doc_id}")
            data.update(fields)
            self._write(collection, doc_id, data)
        self._notify(collection, "update", doc_id, data)
        return data

    def increment(
        self,
        collection: str,
        doc_id: str,
        field: str,
        amount: int = 1,
        **set_fields: Any,
    ) -> None:
        """Atomically add `amount` to a numeric field and set other fields.

        Counter bumps are bookkeeping, not content changes: no event is emitted.
        """
        with self._lock:
            data = self._read(collection, doc_id)
            if data is None:
                raise KeyError(f"Document not found: {collection}/{doc_id}")
            data[field] = (data.get(field) or 0) + amount
            data.update(set_fields)
            self._write(collection, doc_id, data)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._remove(collection, doc_id)

    # ── Change notifications ──────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, collection: str, event: str, doc_id: str, data: dict[str, Any]) -> None:
        if not self._listeners:
            return
        from .events import DocumentEvent

        change = DocumentEvent(
            collection=collection,
            event=event,  # type: ignore[arg-type]
            document_id=doc_id,
            data=copy.deepcopy(data),
        )
        for listener in self._listeners:
            try:
                listener(change)
            except Exception:
                log.error("Change listener failed  collection=%s id=%s",
                          collection, doc_id, exc_info=True)


class MemoryDocumentStore(DocumentStore):
    """In-memory store, no disk I/O. Use in tests."""

    def __init__(self) -> None:
        super().__init__()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _read(self, collection: str, doc_id: str) -> "dict[str, Any] | None":
        data = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def _remove(self, collection: str, doc_id: str) -> bool:
        return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def _ids(self, collection: str) -> list[str]:
        return list(self._collections.get(collection, {}))


class FileDocumentStore(DocumentStore):
    """File-based store. Reads/writes ~/.tourmail/data/{collection}/{id}.json."""

    def __init__(self, data_dir: Path) -> None:
        super().__init__()
        self._data_dir = data_dir
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, collection: str, doc_id: str) -> Path:
        return self._data_dir / collection / f"{doc_id}.json"

    def _read(self, collection: str, doc_id: str) -> "dict[str, Any] | None":
        path = self._path(collection, doc_id)
        if not path.exists():
            return None
        return json.loads(path.read_text())

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        path = self._path(collection, doc_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic write via temp file
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, indent=2))
        tmp.replace(path)

    def _remove(self, collection: str, doc_id: str) -> bool:
        path = self._path(collection, doc_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def _ids(self, collection: str) -> list[str]:
        directory = self._data_dir / collection
        if not directory.exists():
            return []
        return [p.stem for p in directory.glob("*.json")]
