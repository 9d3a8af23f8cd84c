"""Tests for the trigger registry."""

from datetime import datetime, timezone

import pytest

from factories import make_trigger
from tourmail.core.errors import TriggerNotFoundError
from tourmail.core.models import EmailTrigger
from tourmail.core.trigger import COLLECTION, TriggerRegistry


@pytest.fixture
def registry(memory_store):
    return TriggerRegistry(memory_store)


def test_save_and_load(registry):
    registry.save(make_trigger())
    trigger = registry.load("mx-welcome")
    assert trigger.template_id == "welcome"
    assert trigger.data_mapping == {"firstName": "givenName"}
    assert trigger.enabled is True
    assert trigger.send_count == 0


def test_load_missing(registry):
    with pytest.raises(TriggerNotFoundError):
        registry.load("nope")


def test_list_sorted_by_name(registry):
    registry.save(make_trigger(id="t1", name="Waitlist"))
    registry.save(make_trigger(id="t2", name="Announcement"))
    assert [t.name for t in registry.list()] == ["Announcement", "Waitlist"]


def test_list_skips_invalid_documents(registry, memory_store):
    registry.save(make_trigger())
    memory_store.set(COLLECTION, "broken", {"name": "Broken"})
    assert [t.id for t in registry.list()] == ["mx-welcome"]


def test_find_enabled(registry):
    registry.save(make_trigger(id="a"))
    registry.save(make_trigger(id="b", enabled=False))
    registry.save(make_trigger(id="c", event="update"))
    registry.save(make_trigger(id="d", collection="waitlist"))
    registry.save(EmailTrigger(id="m", name="Manual", template_id="welcome", trigger_type="manual"))

    assert [t.id for t in registry.find_enabled("registrations", "create")] == ["a"]
    assert [t.id for t in registry.find_enabled("registrations", "update")] == ["c"]


def test_save_preserves_stats(registry):
    registry.save(make_trigger())
    registry.record_send("mx-welcome")
    registry.record_send("mx-welcome")

    edited = registry.save(make_trigger(name="Renamed", send_count=0, last_triggered=None))

    assert edited.name == "Renamed"
    assert edited.send_count == 2
    assert edited.last_triggered is not None
    assert registry.load("mx-welcome").send_count == 2


def test_record_send(registry):
    registry.save(make_trigger())
    at = datetime(2026, 3, 19, 8, 30, tzinfo=timezone.utc)
    registry.record_send("mx-welcome", at=at)

    trigger = registry.load("mx-welcome")
    assert trigger.send_count == 1
    assert trigger.last_triggered == at


def test_record_send_does_not_notify(registry, memory_store):
    registry.save(make_trigger())
    events = []
    memory_store.subscribe(events.append)
    registry.record_send("mx-welcome")
    assert events == []


def test_set_enabled(registry):
    registry.save(make_trigger())
    assert registry.set_enabled("mx-welcome", False).enabled is False
    assert registry.find_enabled("registrations", "create") == []
    assert registry.set_enabled("mx-welcome", True).enabled is True


def test_set_enabled_missing(registry):
    with pytest.raises(TriggerNotFoundError):
        registry.set_enabled("nope", True)


def test_delete(registry):
    registry.save(make_trigger())
    registry.delete("mx-welcome")
    with pytest.raises(TriggerNotFoundError):
        registry.load("mx-welcome")
    with pytest.raises(TriggerNotFoundError):
        registry.delete("mx-welcome")
