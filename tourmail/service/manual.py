"""
Manual dispatch: administrator-initiated single send, bulk send and preview.

Every entry point checks the caller against the admin policy before touching
templates or documents. These paths bypass trigger matching and never touch
trigger statistics.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..core.errors import DispatchError

if TYPE_CHECKING:
    from ..core.auth import AdminPolicy
    from ..core.dispatcher import Dispatcher
    from ..core.models import BulkRecipient, BulkSendResult, PreviewResult, RiderSummary
    from ..core.store import DocumentStore

log = logging.getLogger("tourmail.manual")

MAX_BULK_ERRORS = 10
RIDERS_COLLECTION = "registrations"


class ManualDispatch:
    def __init__(
        self,
        dispatcher: "Dispatcher",
        policy: "AdminPolicy",
        store: "DocumentStore",
    ) -> None:
        self._dispatcher = dispatcher
        self._policy = policy
        self._store = store

    async def send_one(
        self,
        caller: str | None,
        template_id: str,
        recipient: str,
        bindings: "dict[str, Any] | None" = None,
    ) -> None:
        """Send one message. Raises DispatchError if delivery failed."""
        from ..core.models import DispatchContext

        admin = self._policy.require(caller)
        if not template_id or not recipient:
            raise ValueError("template_id and recipient required")

        log.info("Manual send  template=%s recipient=%s by=%s", template_id, recipient, admin)
        result = await self._dispatcher.dispatch(
            template_id, recipient, bindings or {}, DispatchContext(sent_by=admin),
        )
        if not result.success:
            raise DispatchError(result.error or "Failed to send email")

    async def send_bulk(
        self,
        caller: str | None,
        template_id: str,
        recipients: "list[BulkRecipient]",
    ) -> "BulkSendResult":
        """Send to each recipient in turn; failures are counted, not raised."""
        from ..core.models import BulkSendResult, DispatchContext

        admin = self._policy.require(caller)
        if not template_id or not recipients:
            raise ValueError("template_id and recipients required")

        log.info("Bulk send  template=%s count=%d by=%s", template_id, len(recipients), admin)
        summary = BulkSendResult()
        for item in recipients:
            result = await self._dispatcher.dispatch(
                template_id, item.recipient, item.bindings, DispatchContext(sent_by=admin),
            )
            if result.success:
                summary.sent += 1
            else:
                summary.failed += 1
                if len(summary.errors) < MAX_BULK_ERRORS:
                    summary.errors.append(f"{item.recipient}: {result.error}")

        log.info("Bulk done  template=%s sent=%d failed=%d",
                 template_id, summary.sent, summary.failed)
        return summary

    def preview(
        self,
        caller: str | None,
        template_id: str,
        bindings: "dict[str, Any] | None" = None,
    ) -> "PreviewResult":
        """Render without sending or logging. Without bindings, sample data is used."""
        self._policy.require(caller)
        if not template_id:
            raise ValueError("template_id required")

        template = self._dispatcher.templates.get(template_id)
        if bindings is None:
            bindings = template.preview_bindings()
        return self._dispatcher.render_message(template, bindings)

    def list_riders(self, caller: str | None) -> "list[RiderSummary]":
        """Registrations shaped for picking manual-send recipients."""
        from ..core.models import RiderSummary

        self._policy.require(caller)
        riders = []
        for doc_id, data in self._store.list(RIDERS_COLLECTION):
            full_name = data.get("fullName") or ""
            riders.append(RiderSummary(
                id=doc_id,
                uid=data.get("uid"),
                email=data.get("email"),
                full_name=full_name or None,
                first_name=full_name.split(" ")[0] if full_name else "",
                phone=data.get("phone"),
                city=data.get("city"),
                state=data.get("state"),
                bike_year=data.get("bikeYear"),
                bike_model=data.get("bikeModel"),
                balance=data.get("balance") or 0,
                status=data.get("status"),
            ))
        return riders
