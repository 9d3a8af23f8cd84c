"""Settings routes (sender identity, admins, branding)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..deps import caller_id, require_admin

router = APIRouter()


class EmailSettings(BaseModel):
    provider: str | None = None
    sendgrid_api_key: str | None = None
    from_email: str | None = None
    from_name: str | None = None
    reply_to: str | None = None


class BrandingSettings(BaseModel):
    title: str | None = None
    tagline: str | None = None


class SettingsPatch(BaseModel):
    email: EmailSettings | None = None
    branding: BrandingSettings | None = None
    admin_ids: list[str] | None = None


def _mask(secret: str) -> str:
    return f"…{secret[-4:]}" if len(secret) > 4 else ("set" if secret else "")


@router.get("/settings")
async def get_settings(request: Request, caller: str | None = Depends(caller_id)):
    require_admin(request, caller)
    config = request.app.state.config
    return {
        "email": {
            "provider": config.mail_provider,
            "sendgrid_api_key": _mask(config.sendgrid_api_key),
            "from_email": config.from_email,
            "from_name": config.from_name,
            "reply_to": config.reply_to,
        },
        "branding": {"title": config.brand_title, "tagline": config.brand_tagline},
        "admin_ids": config.admin_ids,
        "watch": config.watched_collections,
    }


@router.patch("/settings")
async def patch_settings(body: SettingsPatch, request: Request, caller: str | None = Depends(caller_id)):
    """Persist changes. Sender, branding and admin changes apply on next restart."""
    require_admin(request, caller)
    config = request.app.state.config

    if body.email is not None:
        for key, value in body.email.model_dump(exclude_none=True).items():
            config.set(f"email.{key}", value, save=False)

    if body.branding is not None:
        for key, value in body.branding.model_dump(exclude_none=True).items():
            config.set(f"branding.{key}", value, save=False)

    if body.admin_ids is not None:
        config.set("auth.admin_ids", body.admin_ids, save=False)

    config.save()
    return {"ok": True}
