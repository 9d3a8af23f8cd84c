"""
Document write routes for the host application.

Writes go through the document store, so creates/updates on watched
collections reach the change feed exactly like any other store write.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from ..deps import caller_id

router = APIRouter()

# Engine-owned collections are edited through their own routes
_RESERVED = {"emailTemplates", "emailTriggers", "emailLog"}


def _check(collection: str, caller: str | None) -> None:
    if not caller:
        raise HTTPException(status_code=401, detail="Must be logged in.")
    if collection in _RESERVED:
        raise HTTPException(status_code=403, detail=f"Collection is managed by the email system: {collection}")


@router.get("/collections/{collection}")
async def list_documents(collection: str, request: Request, caller: str | None = Depends(caller_id)):
    _check(collection, caller)
    store = request.app.state.store
    return [{"id": doc_id, **data} for doc_id, data in store.list(collection)]


@router.put("/collections/{collection}/{doc_id}")
async def put_document(
    collection: str, doc_id: str, data: dict[str, Any], request: Request,
    caller: str | None = Depends(caller_id),
):
    _check(collection, caller)
    request.app.state.store.set(collection, doc_id, data)
    return {"id": doc_id, **data}


@router.patch("/collections/{collection}/{doc_id}")
async def patch_document(
    collection: str, doc_id: str, fields: dict[str, Any], request: Request,
    caller: str | None = Depends(caller_id),
):
    _check(collection, caller)
    try:
        data = request.app.state.store.update(collection, doc_id, fields)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Document not found: {collection}/{doc_id}")
    return {"id": doc_id, **data}
