"""
BaseMailer ABC and MockMailer for testing.

Mailers deliver one OutgoingEmail. Returning normally means success; any
raised exception means the provider did not accept the message. Provider
status codes are not interpreted beyond that.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from .errors import MailDeliveryError

if TYPE_CHECKING:
    from ..config import Config
    from .models import OutgoingEmail


class BaseMailer(ABC):
    """Abstract base for all delivery providers."""

    provider_id: ClassVar[str]

    @property
    def configured(self) -> bool:
        return True

    @abstractmethod
    async def send(self, message: "OutgoingEmail") -> None: ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class MockMailer(BaseMailer):
    """Recording mailer for tests. No I/O, no network."""

    provider_id = "mock"

    def __init__(self, fail_for: "set[str] | None" = None, delay: float = 0.0) -> None:
        self.fail_for = set(fail_for or ())
        self.sent: list["OutgoingEmail"] = []
        self.attempts: list[str] = []
        self._delay = delay

    async def send(self, message: "OutgoingEmail") -> None:
        self.attempts.append(message.to)
        if self._delay:
            await asyncio.sleep(self._delay)
        if message.to in self.fail_for:
            raise MailDeliveryError(f"Mailbox unavailable: {message.to}")
        self.sent.append(message)


def create_mailer(config: "Config") -> BaseMailer:
    """Build the delivery provider named by email.provider."""
    provider = config.mail_provider
    if provider == "sendgrid":
        from ..providers.sendgrid import SendGridMailer
        return SendGridMailer(api_key=config.sendgrid_api_key, timeout=config.mail_timeout)
    if provider == "console":
        from ..providers.console import ConsoleMailer
        return ConsoleMailer()
    raise ValueError(f"Unknown mail provider: {provider}")
