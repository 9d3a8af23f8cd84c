"""
SendGrid delivery provider for Tourmail.

Posts one message per call to the v3 mail/send endpoint with httpx.
A 2xx response is success; anything else raises MailDeliveryError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import MailDeliveryError
from ..core.mailer import BaseMailer
from ..core.models import OutgoingEmail

log = logging.getLogger("tourmail.sendgrid")

SENDGRID_API = "https://api.sendgrid.com/v3"


def build_payload(message: OutgoingEmail) -> dict[str, Any]:
    sender: dict[str, str] = {"email": message.sender.email}
    if message.sender.name:
        sender["name"] = message.sender.name

    payload: dict[str, Any] = {
        "personalizations": [{"to": [{"email": message.to}]}],
        "from": sender,
        "subject": message.subject,
        "content": [{"type": "text/html", "value": message.html}],
    }
    if message.sender.reply_to:
        payload["reply_to"] = {"email": message.sender.reply_to}
    return payload


class SendGridMailer(BaseMailer):
    """Delivers through the SendGrid HTTP API."""

    provider_id = "sendgrid"

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        transport: "httpx.AsyncBaseTransport | None" = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def send(self, message: OutgoingEmail) -> None:
        if not self._api_key:
            raise MailDeliveryError(
                "SendGrid API key is not configured. "
                "Set it in Settings or via SENDGRID_API_KEY env var."
            )

        async with httpx.AsyncClient(
            base_url=SENDGRID_API,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            r = await client.post(
                "/mail/send",
                json=build_payload(message),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )

        if r.status_code >= 300:
            detail = r.text[:200] if r.text else r.reason_phrase
            raise MailDeliveryError(f"SendGrid rejected message (HTTP {r.status_code}): {detail}")
        log.debug("Accepted  to=%s status=%d", message.to, r.status_code)

    def __repr__(self) -> str:
        return f"SendGridMailer(configured={self.configured})"


async def check_api_key(api_key: str, timeout: float = 10.0) -> "str | None":
    """Return None if the key is accepted by SendGrid, else an error message."""
    try:
        async with httpx.AsyncClient(base_url=SENDGRID_API, timeout=timeout) as client:
            r = await client.get("/scopes", headers={"Authorization": f"Bearer {api_key}"})
    except httpx.HTTPError as e:
        return str(e) or e.__class__.__name__
    if r.status_code == 200:
        return None
    return f"Invalid API key (HTTP {r.status_code})"
