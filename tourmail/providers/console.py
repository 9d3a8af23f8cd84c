"""Console delivery provider: logs messages instead of sending them (dev mode)."""

from __future__ import annotations

import logging

from ..core.mailer import BaseMailer
from ..core.models import OutgoingEmail

log = logging.getLogger("tourmail.console_mail")


class ConsoleMailer(BaseMailer):
    provider_id = "console"

    async def send(self, message: OutgoingEmail) -> None:
        log.info("Would send  to=%s from=%s subject=%r html_chars=%d",
                 message.to, message.sender.email, message.subject, len(message.html))
