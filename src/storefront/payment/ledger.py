"""Ledger of gateway webhook deliveries that have been handled.

A row is written in the same unit of work as the payment change it caused,
so a redelivered event id is recognised even when the payment state alone
could not tell the delivery apart from a new one.
"""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.aggregate
class ProcessedWebhook:
    id = Identifier(identifier=True)  # gateway event id
    event_type = String(required=True, max_length=100)
    payment_id = Identifier()
    outcome = String(required=True, max_length=20)
    received_at = DateTime(required=True)


@storefront.repository(part_of=ProcessedWebhook)
class ProcessedWebhookRepository:
    def seen(self, event_id: str) -> bool:
        return self._dao.query.filter(id=event_id).all().total > 0
