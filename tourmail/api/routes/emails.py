"""Manual send, bulk send, preview, outcome log and riders routes."""
from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..deps import ENGINE_ERRORS, caller_id, require_admin, to_http

router = APIRouter()


class SendBody(BaseModel):
    template_id: str
    recipient: str
    bindings: dict[str, Any] = {}


class BulkRecipientBody(BaseModel):
    recipient: str
    bindings: dict[str, Any] = {}


class BulkBody(BaseModel):
    template_id: str
    recipients: list[BulkRecipientBody]


class PreviewBody(BaseModel):
    template_id: str
    bindings: dict[str, Any] | None = None


@router.post("/emails/send")
async def send_email(body: SendBody, request: Request, caller: str | None = Depends(caller_id)):
    manual = request.app.state.manual
    try:
        await manual.send_one(caller, body.template_id, body.recipient, body.bindings)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return {"success": True}


@router.post("/emails/bulk")
async def send_bulk(body: BulkBody, request: Request, caller: str | None = Depends(caller_id)):
    from ...core.models import BulkRecipient
    manual = request.app.state.manual
    recipients = [BulkRecipient(**r.model_dump()) for r in body.recipients]
    try:
        result = await manual.send_bulk(caller, body.template_id, recipients)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return result.model_dump()


@router.post("/emails/preview")
async def preview_email(body: PreviewBody, request: Request, caller: str | None = Depends(caller_id)):
    manual = request.app.state.manual
    try:
        result = manual.preview(caller, body.template_id, body.bindings)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return result.model_dump()


@router.get("/emails/log")
async def list_log(
    request: Request,
    limit: int = 100,
    status: Literal["sent", "failed"] | None = None,
    trigger_id: str | None = None,
    caller: str | None = Depends(caller_id),
):
    require_admin(request, caller)
    entries = request.app.state.email_log.recent(limit=limit, status=status, trigger_id=trigger_id)
    return [e.model_dump(mode="json") for e in entries]


@router.get("/emails/riders")
async def list_riders(request: Request, caller: str | None = Depends(caller_id)):
    manual = request.app.state.manual
    try:
        riders = manual.list_riders(caller)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return {"riders": [r.model_dump() for r in riders]}
