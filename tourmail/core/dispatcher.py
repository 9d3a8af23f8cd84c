"""
Dispatcher: render, send and log one (template, recipient, bindings) triple.

Every call writes exactly one outcome log entry, whether delivery succeeded
or not, and never raises for template, rendering or transport failures:
those come back as DispatchResult(success=False, error=...).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .render import render, wrap_in_layout

if TYPE_CHECKING:
    from .email_log import EmailLog
    from .mailer import BaseMailer
    from .models import (
        Branding, DispatchContext, DispatchResult, EmailTemplate, PreviewResult, Sender,
    )
    from .template import TemplateRepository

log = logging.getLogger("tourmail.dispatch")

SYSTEM_SENDER = "system-trigger"
RENDER_FAILED_SUBJECT = "Failed to render"


class Dispatcher:
    """Template → render → envelope → mailer → outcome log."""

    def __init__(
        self,
        templates: "TemplateRepository",
        mailer: "BaseMailer",
        email_log: "EmailLog",
        sender: "Sender",
        branding: "Branding",
    ) -> None:
        self.templates = templates
        self.mailer = mailer
        self.email_log = email_log
        self.sender = sender
        self.branding = branding

    def render_message(
        self, template: "EmailTemplate", bindings: "dict[str, Any]",
    ) -> "PreviewResult":
        """Rendered subject plus the body wrapped in the HTML envelope."""
        from .models import PreviewResult

        subject = render(template.subject, bindings)
        body = render(template.body, bindings)
        html = wrap_in_layout(body, title=self.branding.title, tagline=self.branding.tagline)
        return PreviewResult(subject=subject, html=html)

    async def dispatch(
        self,
        template_id: str,
        recipient: str,
        bindings: "dict[str, Any]",
        context: "DispatchContext",
    ) -> "DispatchResult":
        from .models import DispatchResult, EmailLogEntry, OutgoingEmail

        template: "EmailTemplate | None" = None
        subject: str | None = None
        try:
            template = self.templates.get(template_id)
            rendered = self.render_message(template, bindings)
            subject = rendered.subject
            await self.mailer.send(OutgoingEmail(
                to=recipient,
                sender=self.sender,
                subject=rendered.subject,
                html=rendered.html,
            ))
        except Exception as e:
            error = str(e) or e.__class__.__name__
            self.email_log.record(EmailLogEntry(
                trigger_id=context.trigger_id,
                template_id=template_id,
                template_name=template.name if template else template_id,
                recipient=recipient,
                subject=subject if subject is not None else RENDER_FAILED_SUBJECT,
                status="failed",
                error=error,
                sent_at=datetime.now(timezone.utc),
                sent_by=context.sent_by,
                document_id=context.document_id,
                collection=context.collection,
            ))
            log.error("Failed  recipient=%s template=%s error=%s", recipient, template_id, error)
            return DispatchResult(success=False, error=error)

        self.email_log.record(EmailLogEntry(
            trigger_id=context.trigger_id,
            template_id=template_id,
            template_name=template.name,
            recipient=recipient,
            subject=subject,
            status="sent",
            sent_at=datetime.now(timezone.utc),
            sent_by=context.sent_by,
            document_id=context.document_id,
            collection=context.collection,
        ))
        log.info("Sent  recipient=%s template=%s by=%s", recipient, template_id, context.sent_by)
        return DispatchResult(success=True)
