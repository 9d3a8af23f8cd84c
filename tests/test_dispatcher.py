"""Tests for the Dispatcher: render, send, and exactly one outcome log entry."""

import pytest

from factories import make_template
from tourmail.core.dispatcher import RENDER_FAILED_SUBJECT
from tourmail.core.models import DispatchContext

MANUAL = DispatchContext(sent_by="admin-1")


def log_entries(engine):
    return engine.email_log.recent()


@pytest.mark.asyncio
async def test_dispatch_success_sends_and_logs(engine):
    engine.templates.save(make_template())

    result = await engine.dispatcher.dispatch(
        "welcome", "a@example.com", {"firstName": "Ana", "city": "Loreto"}, MANUAL,
    )

    assert result.success is True
    assert result.error is None
    assert len(engine.mailer.sent) == 1
    message = engine.mailer.sent[0]
    assert message.to == "a@example.com"
    assert message.subject == "Welcome, Ana!"
    assert "<p>Hi Ana, see you in Loreto.</p>" in message.html
    assert "Baja Moto Tour" in message.html
    assert message.sender.email == "tours@example.com"
    assert message.sender.reply_to == "help@example.com"

    entries = log_entries(engine)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.status == "sent"
    assert entry.error is None
    assert entry.trigger_id is None
    assert entry.template_name == "Welcome"
    assert entry.subject == "Welcome, Ana!"
    assert entry.sent_by == "admin-1"


@pytest.mark.asyncio
async def test_missing_template_fails_and_logs(engine):
    result = await engine.dispatcher.dispatch("nope", "a@example.com", {}, MANUAL)

    assert result.success is False
    assert "Template not found: nope" in result.error
    assert engine.mailer.attempts == []
    [entry] = log_entries(engine)
    assert entry.status == "failed"
    assert entry.subject == RENDER_FAILED_SUBJECT
    assert entry.template_name == "nope"
    assert "Template not found" in entry.error


@pytest.mark.asyncio
async def test_transport_failure_logs_rendered_subject(engine):
    engine.templates.save(make_template())
    engine.mailer.fail_for.add("bad@example.com")

    result = await engine.dispatcher.dispatch(
        "welcome", "bad@example.com", {"firstName": "Bob"}, MANUAL,
    )

    assert result.success is False
    assert "Mailbox unavailable" in result.error
    [entry] = log_entries(engine)
    assert entry.status == "failed"
    assert entry.subject == "Welcome, Bob!"
    assert entry.template_name == "Welcome"
    assert entry.recipient == "bad@example.com"


@pytest.mark.asyncio
async def test_unmapped_variables_stay_visible(engine):
    engine.templates.save(make_template())
    await engine.dispatcher.dispatch("welcome", "a@example.com", {"firstName": "Ana"}, MANUAL)
    assert "{{city}}" in engine.mailer.sent[0].html


@pytest.mark.asyncio
async def test_trigger_context_copied_to_log(engine):
    engine.templates.save(make_template())
    context = DispatchContext(
        sent_by="system-trigger", trigger_id="t1", document_id="r1", collection="registrations",
    )
    await engine.dispatcher.dispatch("welcome", "a@example.com", {"firstName": "Ana"}, context)

    [entry] = log_entries(engine)
    assert (entry.trigger_id, entry.document_id, entry.collection, entry.sent_by) == (
        "t1", "r1", "registrations", "system-trigger",
    )


@pytest.mark.asyncio
async def test_log_write_failure_does_not_change_result(engine, monkeypatch):
    engine.templates.save(make_template())
    original_add = engine.store.add

    def failing_add(collection, data):
        if collection == "emailLog":
            raise OSError("disk full")
        return original_add(collection, data)

    monkeypatch.setattr(engine.store, "add", failing_add)

    ok = await engine.dispatcher.dispatch("welcome", "a@example.com", {"firstName": "Ana"}, MANUAL)
    assert ok.success is True

    engine.mailer.fail_for.add("bad@example.com")
    bad = await engine.dispatcher.dispatch("welcome", "bad@example.com", {}, MANUAL)
    assert bad.success is False
    assert "Mailbox unavailable" in bad.error


@pytest.mark.asyncio
async def test_one_log_entry_per_call(engine):
    engine.templates.save(make_template())
    engine.mailer.fail_for.add("b@example.com")
    for recipient in ["a@example.com", "b@example.com", "c@example.com"]:
        await engine.dispatcher.dispatch("welcome", recipient, {}, MANUAL)
    await engine.dispatcher.dispatch("missing", "d@example.com", {}, MANUAL)

    entries = log_entries(engine)
    assert len(entries) == 4
    by_recipient = {e.recipient: e.status for e in entries}
    assert by_recipient == {
        "a@example.com": "sent",
        "b@example.com": "failed",
        "c@example.com": "sent",
        "d@example.com": "failed",
    }
