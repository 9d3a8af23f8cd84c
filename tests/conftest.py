"""
Shared pytest fixtures for Tourmail tests.
"""

from types import SimpleNamespace

import pytest


@pytest.fixture
def tmp_config(tmp_path):
    """A Config instance using tmp_path as base_dir."""
    from tourmail.config import Config
    return Config(base_dir=tmp_path)


@pytest.fixture
def memory_store():
    from tourmail.core.store import MemoryDocumentStore
    return MemoryDocumentStore()


@pytest.fixture
def mock_mailer():
    from tourmail.core.mailer import MockMailer
    return MockMailer()


@pytest.fixture
def engine(memory_store, mock_mailer):
    """Engine objects wired over an in-memory store and a recording mailer."""
    from tourmail.core.auth import StaticAdminPolicy
    from tourmail.core.dispatcher import Dispatcher
    from tourmail.core.email_log import EmailLog
    from tourmail.core.models import Branding, Sender
    from tourmail.core.template import TemplateRepository
    from tourmail.core.trigger import TriggerRegistry
    from tourmail.service.manual import ManualDispatch
    from tourmail.service.processor import EventProcessor

    templates = TemplateRepository(memory_store)
    registry = TriggerRegistry(memory_store)
    email_log = EmailLog(memory_store)
    dispatcher = Dispatcher(
        templates=templates,
        mailer=mock_mailer,
        email_log=email_log,
        sender=Sender(email="tours@example.com", name="Baja Moto Tour", reply_to="help@example.com"),
        branding=Branding(title="Baja Moto Tour", tagline="March 19-27"),
    )
    return SimpleNamespace(
        store=memory_store,
        mailer=mock_mailer,
        templates=templates,
        registry=registry,
        email_log=email_log,
        dispatcher=dispatcher,
        processor=EventProcessor(registry=registry, dispatcher=dispatcher),
        manual=ManualDispatch(
            dispatcher=dispatcher,
            policy=StaticAdminPolicy(["admin-1"]),
            store=memory_store,
        ),
    )
