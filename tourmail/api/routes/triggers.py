"""Trigger CRUD + enable/disable routes."""
from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..deps import ENGINE_ERRORS, caller_id, require_admin, to_http

router = APIRouter()


class ConditionBody(BaseModel):
    field: str
    operator: Literal["==", "!=", ">", "<", "contains", "exists"]
    value: str | int | float | bool = ""


class TriggerBody(BaseModel):
    name: str
    description: str = ""
    enabled: bool = True
    template_id: str
    trigger_type: Literal["event-driven", "manual"] = "event-driven"
    collection: str | None = None
    event: Literal["create", "update", "delete"] | None = None
    conditions: list[ConditionBody] = []
    recipient_field: str = "email"
    data_mapping: dict[str, str] = {}


class CreateTriggerBody(TriggerBody):
    id: str


def _build(trigger_id: str, body: TriggerBody):
    from ...core.models import EmailTrigger
    data = body.model_dump(exclude={"id"})
    try:
        return EmailTrigger(id=trigger_id, **data)
    except ValueError as e:
        raise to_http(e) from e


@router.get("/triggers")
async def list_triggers(request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    return [t.model_dump(mode="json") for t in request.app.state.registry.list()]


@router.get("/triggers/{trigger_id}")
async def get_trigger(trigger_id: str, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    try:
        return request.app.state.registry.load(trigger_id).model_dump(mode="json")
    except ENGINE_ERRORS as e:
        raise to_http(e) from e


@router.post("/triggers")
async def create_trigger(body: CreateTriggerBody, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    registry = request.app.state.registry
    trigger = _build(body.id, body)
    try:
        registry.load(body.id)
    except LookupError:
        return registry.save(trigger).model_dump(mode="json")
    raise HTTPException(status_code=409, detail=f"Trigger already exists: {body.id}")


@router.put("/triggers/{trigger_id}")
async def update_trigger(
    trigger_id: str, body: TriggerBody, request: Request, caller: str | None = Depends(caller_id),
):
    require_admin(request, caller)
    registry = request.app.state.registry
    try:
        registry.load(trigger_id)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return registry.save(_build(trigger_id, body)).model_dump(mode="json")


@router.post("/triggers/{trigger_id}/enable")
async def enable_trigger(trigger_id: str, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    try:
        return request.app.state.registry.set_enabled(trigger_id, True).model_dump(mode="json")
    except ENGINE_ERRORS as e:
        raise to_http(e) from e


@router.post("/triggers/{trigger_id}/disable")
async def disable_trigger(trigger_id: str, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    try:
        return request.app.state.registry.set_enabled(trigger_id, False).model_dump(mode="json")
    except ENGINE_ERRORS as e:
        raise to_http(e) from e


@router.delete("/triggers/{trigger_id}")
async def delete_trigger(trigger_id: str, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    try:
        request.app.state.registry.delete(trigger_id)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return {"ok": True}
