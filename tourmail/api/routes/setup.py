"""Setup API routes: first-run status and mail provider check."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..deps import caller_id, require_admin

router = APIRouter()


class TestMailerBody(BaseModel):
    provider: str = "sendgrid"
    api_key: str | None = None


@router.get("/setup/status")
async def setup_status(request: Request):
    from ...core.models import SetupStatus
    config = request.app.state.config
    return SetupStatus(required=config.setup_required).model_dump()


@router.post("/setup/test-mailer")
async def test_mailer(body: TestMailerBody, request: Request, caller: str | None = Depends(caller_id)):
    """Open during first run; admin only once settings.json exists."""
    from ...core.models import MailerTestResult

    config = request.app.state.config
    if not config.setup_required:
        require_admin(request, caller)

    if body.provider == "console":
        return MailerTestResult(ok=True).model_dump()

    if body.provider == "sendgrid":
        from ...providers.sendgrid import check_api_key
        api_key = body.api_key or config.sendgrid_api_key
        if not api_key:
            return MailerTestResult(ok=False, error="API key required").model_dump()
        error = await check_api_key(api_key, timeout=config.mail_timeout)
        return MailerTestResult(ok=error is None, error=error).model_dump()

    return MailerTestResult(ok=False, error=f"Unknown provider: {body.provider}").model_dump()
