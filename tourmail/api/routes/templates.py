"""Template CRUD routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..deps import ENGINE_ERRORS, caller_id, require_admin, to_http

router = APIRouter()


class TemplateVariableBody(BaseModel):
    name: str
    description: str = ""
    example: str = ""


class TemplateBody(BaseModel):
    name: str
    subject: str
    body: str
    variables: list[TemplateVariableBody] = []
    category: str | None = None
    sample_data: dict[str, str] = {}


class CreateTemplateBody(TemplateBody):
    id: str


@router.get("/templates")
async def list_templates(request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    return [t.model_dump() for t in request.app.state.templates.list()]


@router.get("/templates/{template_id}")
async def get_template(template_id: str, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    try:
        return request.app.state.templates.get(template_id).model_dump()
    except ENGINE_ERRORS as e:
        raise to_http(e) from e


@router.post("/templates")
async def create_template(body: CreateTemplateBody, request: Request, caller: str | None = Depends(caller_id)):
    from ...core.models import EmailTemplate
    require_admin(request, caller)
    templates = request.app.state.templates
    try:
        templates.get(body.id)
    except LookupError:
        template = EmailTemplate(**body.model_dump())
        templates.save(template)
        return template.model_dump()
    raise HTTPException(status_code=409, detail=f"Template already exists: {body.id}")


@router.put("/templates/{template_id}")
async def update_template(
    template_id: str, body: TemplateBody, request: Request, caller: str | None = Depends(caller_id),
):
    from ...core.models import EmailTemplate
    require_admin(request, caller)
    templates = request.app.state.templates
    try:
        templates.get(template_id)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    template = EmailTemplate(id=template_id, **body.model_dump())
    templates.save(template)
    return template.model_dump()


@router.delete("/templates/{template_id}")
async def delete_template(template_id: str, request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    try:
        request.app.state.templates.delete(template_id)
    except ENGINE_ERRORS as e:
        raise to_http(e) from e
    return {"ok": True}
