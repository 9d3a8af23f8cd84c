"""Tests for the SendGrid provider against a mocked HTTP transport."""

import json

import httpx
import pytest

from tourmail.core.errors import MailDeliveryError
from tourmail.core.models import OutgoingEmail, Sender
from tourmail.providers.sendgrid import SendGridMailer, build_payload


def make_message(reply_to="help@example.com"):
    return OutgoingEmail(
        to="ana@example.com",
        sender=Sender(email="tours@example.com", name="Baja Moto Tour", reply_to=reply_to),
        subject="Welcome, Ana!",
        html="<p>Hola</p>",
    )


def test_build_payload():
    payload = build_payload(make_message())
    assert payload == {
        "personalizations": [{"to": [{"email": "ana@example.com"}]}],
        "from": {"email": "tours@example.com", "name": "Baja Moto Tour"},
        "subject": "Welcome, Ana!",
        "content": [{"type": "text/html", "value": "<p>Hola</p>"}],
        "reply_to": {"email": "help@example.com"},
    }


def test_build_payload_without_reply_to():
    assert "reply_to" not in build_payload(make_message(reply_to=None))


@pytest.mark.asyncio
async def test_send_posts_to_mail_send():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202)

    mailer = SendGridMailer("SG.test", transport=httpx.MockTransport(handler))
    await mailer.send(make_message())

    [request] = requests
    assert request.method == "POST"
    assert request.url == "https://api.sendgrid.com/v3/mail/send"
    assert request.headers["Authorization"] == "Bearer SG.test"
    assert json.loads(request.content)["subject"] == "Welcome, Ana!"


@pytest.mark.asyncio
async def test_send_rejected_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text='{"errors":[{"message":"bad from"}]}')

    mailer = SendGridMailer("SG.test", transport=httpx.MockTransport(handler))
    with pytest.raises(MailDeliveryError, match="HTTP 400"):
        await mailer.send(make_message())


@pytest.mark.asyncio
async def test_send_without_key_raises_before_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    mailer = SendGridMailer("", transport=httpx.MockTransport(handler))
    assert not mailer.configured
    with pytest.raises(MailDeliveryError, match="not configured"):
        await mailer.send(make_message())


@pytest.mark.asyncio
async def test_transport_error_is_logged_as_failure(engine):
    from factories import make_template
    from tourmail.core.models import DispatchContext

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    engine.templates.save(make_template())
    engine.dispatcher.mailer = SendGridMailer("SG.test", transport=httpx.MockTransport(handler))

    result = await engine.dispatcher.dispatch(
        "welcome", "ana@example.com", {"firstName": "Ana"}, DispatchContext(sent_by="admin-1"),
    )

    assert not result.success
    assert "connection refused" in result.error
    [entry] = engine.email_log.recent()
    assert entry.subject == "Welcome, Ana!"
    assert entry.status == "failed"
