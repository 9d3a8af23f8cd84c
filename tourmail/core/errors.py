"""Exception taxonomy shared by the engine and the HTTP layer."""

from __future__ import annotations


class TemplateNotFoundError(LookupError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class TriggerNotFoundError(LookupError):
    def __init__(self, trigger_id: str) -> None:
        super().__init__(f"Trigger not found: {trigger_id}")
        self.trigger_id = trigger_id


class AuthError(Exception):
    """Base for caller identity failures on the manual dispatch API."""


class NotAuthenticatedError(AuthError):
    def __init__(self) -> None:
        super().__init__("Must be logged in.")


class NotAuthorizedError(AuthError):
    def __init__(self) -> None:
        super().__init__("Not authorized.")


class DispatchError(RuntimeError):
    """A manual single send whose dispatch reported failure."""


class MailDeliveryError(RuntimeError):
    """Raised by a mailer when the provider rejects a message."""
