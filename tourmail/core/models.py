"""
Pure Pydantic data models for Tourmail.

No logic, no I/O. These are the serializable data layer:
- Saved to the document store (model_dump(mode="json"))
- Sent over the admin HTTP API
- Passed between dispatcher, processor and manual dispatch
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, field_validator, model_validator

EventType = Literal["create", "update", "delete"]
Operator = Literal["==", "!=", ">", "<", "contains", "exists"]


# ── Templates ────────────────────────────────────────────────────────────────


class TemplateVariable(BaseModel):
    """Documents one binding a template expects."""
    name: str
    description: str = ""
    example: str = ""


class EmailTemplate(BaseModel):
    """A reusable subject/body pair. Stored in emailTemplates/{id}."""
    id: str
    name: str
    subject: str                      # {{token}} string
    body: str                         # {{token}} string, HTML fragment
    variables: list[TemplateVariable] = []
    category: str | None = None
    sample_data: dict[str, str] = {}  # default bindings for preview

    def preview_bindings(self) -> dict[str, str]:
        """Bindings used when a preview is requested without any."""
        if self.sample_data:
            return dict(self.sample_data)
        return {v.name: v.example for v in self.variables if v.example}


# ── Triggers ─────────────────────────────────────────────────────────────────


class TriggerCondition(BaseModel):
    """One field-level predicate. `value` is always compared as a string."""
    field: str
    operator: Operator
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, v: Any) -> str:
        if isinstance(v, bool):
            return "true" if v else "false"
        return "" if v is None else str(v)


class EmailTrigger(BaseModel):
    """A rule binding a document-store event to a template. Stored in emailTriggers/{id}."""
    id: str
    name: str
    description: str = ""
    enabled: bool = True
    template_id: str
    trigger_type: Literal["event-driven", "manual"] = "event-driven"
    collection: str | None = None     # event-driven only
    event: EventType | None = None    # event-driven only
    conditions: list[TriggerCondition] = []   # empty = always match
    recipient_field: str = "email"
    data_mapping: dict[str, str] = {}  # variable -> field name or {{token}} expression
    # Usage statistics, written by the event processor only
    last_triggered: datetime | None = None
    send_count: int = 0

    @model_validator(mode="after")
    def _event_driven_needs_source(self) -> "EmailTrigger":
        if self.trigger_type == "event-driven" and (not self.collection or not self.event):
            raise ValueError("event-driven triggers need both collection and event")
        return self


# ── Dispatch ─────────────────────────────────────────────────────────────────


class Sender(BaseModel):
    """From/reply-to identity stamped on every outgoing message."""
    email: str
    name: str = ""
    reply_to: str | None = None


class Branding(BaseModel):
    """Header and footer text of the HTML envelope."""
    title: str = ""
    tagline: str = ""


class OutgoingEmail(BaseModel):
    """What the delivery provider receives."""
    to: str
    sender: Sender
    subject: str
    html: str


class DispatchContext(BaseModel):
    """Who/what caused a dispatch. Copied onto the outcome log entry."""
    sent_by: str
    trigger_id: str | None = None
    document_id: str | None = None
    collection: str | None = None


class DispatchResult(BaseModel):
    success: bool
    error: str | None = None


class EmailLogEntry(BaseModel):
    """Immutable audit record of one dispatch attempt. Stored in emailLog/{id}."""
    id: str | None = None
    trigger_id: str | None = None     # None for manual sends
    template_id: str
    template_name: str
    recipient: str
    subject: str
    status: Literal["sent", "failed"]
    error: str | None = None
    sent_at: datetime
    sent_by: str
    document_id: str | None = None
    collection: str | None = None

    @model_validator(mode="after")
    def _error_iff_failed(self) -> "EmailLogEntry":
        if (self.status == "failed") != (self.error is not None):
            raise ValueError("error must be set exactly when status is 'failed'")
        return self


# ── Manual dispatch ──────────────────────────────────────────────────────────


class BulkRecipient(BaseModel):
    recipient: str
    bindings: dict[str, Any] = {}


class BulkSendResult(BaseModel):
    sent: int = 0
    failed: int = 0
    errors: list[str] = []            # first 10 only


class PreviewResult(BaseModel):
    subject: str
    html: str


class RiderSummary(BaseModel):
    """Registration row offered to the admin when composing a manual send."""
    id: str
    uid: str | None = None
    email: str | None = None
    full_name: str | None = None
    first_name: str = ""
    phone: str | None = None
    city: str | None = None
    state: str | None = None
    bike_year: str | None = None
    bike_model: str | None = None
    balance: float = 0
    status: str | None = None

    @field_validator("bike_year", "phone", mode="before")
    @classmethod
    def _as_text(cls, v: Any) -> "str | None":
        return None if v is None else str(v)


# ── Setup / provider test ────────────────────────────────────────────────────


class SetupStatus(BaseModel):
    required: bool


class MailerTestResult(BaseModel):
    ok: bool
    error: str | None = None
