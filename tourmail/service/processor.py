"""
Event processor: reacts to one document change by firing matching triggers.

Triggers for the same event run one after another in registry order. Each
trigger is isolated: a skipped or failed trigger never stops the next one,
and nothing raised while handling a trigger escapes process().
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..core.conditions import matches
from ..core.dispatcher import SYSTEM_SENDER
from ..core.mapping import build_bindings

if TYPE_CHECKING:
    from ..core.dispatcher import Dispatcher
    from ..core.events import DocumentEvent
    from ..core.models import EmailTrigger
    from ..core.trigger import TriggerRegistry

log = logging.getLogger("tourmail.processor")


class EventProcessor:
    def __init__(self, registry: "TriggerRegistry", dispatcher: "Dispatcher") -> None:
        self._registry = registry
        self._dispatcher = dispatcher

    async def process(self, event: "DocumentEvent") -> int:
        """Handle one change event. Returns the number of dispatch attempts made."""
        if not self._dispatcher.mailer.configured:
            log.error("Mail provider not configured, skipping  collection=%s id=%s",
                      event.collection, event.document_id)
            return 0

        try:
            triggers = self._registry.find_enabled(event.collection, event.event)
        except Exception:
            log.error("Trigger lookup failed  collection=%s event=%s",
                      event.collection, event.event, exc_info=True)
            return 0

        if not triggers:
            log.debug("No triggers  collection=%s event=%s", event.collection, event.event)
            return 0

        log.info("Processing  collection=%s event=%s id=%s triggers=%d",
                 event.collection, event.event, event.document_id, len(triggers))

        attempts = 0
        for trigger in triggers:
            try:
                if await self._fire(trigger, event):
                    attempts += 1
            except Exception:
                log.error("Trigger failed  trigger=%s id=%s",
                          trigger.id, event.document_id, exc_info=True)
        return attempts

    async def _fire(self, trigger: "EmailTrigger", event: "DocumentEvent") -> bool:
        """Run one trigger against the event. True if a dispatch was attempted."""
        from ..core.models import DispatchContext

        doc = event.data
        if not matches(doc, trigger.conditions):
            log.info("Conditions not met  trigger=%s id=%s", trigger.id, event.document_id)
            return False

        recipient = doc.get(trigger.recipient_field)
        if not recipient:
            log.warning("No recipient  trigger=%s field=%s id=%s",
                        trigger.id, trigger.recipient_field, event.document_id)
            return False

        bindings = build_bindings(doc, trigger.data_mapping)
        await self._dispatcher.dispatch(
            trigger.template_id,
            str(recipient),
            bindings,
            DispatchContext(
                sent_by=SYSTEM_SENDER,
                trigger_id=trigger.id,
                document_id=event.document_id,
                collection=event.collection,
            ),
        )

        try:
            self._registry.record_send(trigger.id)
        except Exception:
            log.error("Failed to update trigger stats  trigger=%s", trigger.id, exc_info=True)
        return True
