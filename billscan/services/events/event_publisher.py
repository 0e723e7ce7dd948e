"""
Azure Service Bus event publishing for saved invoices.

Lets downstream systems react to a reviewed invoice being stored:
- Accounting systems can ingest purchase invoices
- Payout reconciliation can pick up new vendor balances
"""

import json
from datetime import datetime, UTC
from typing import Optional
from dataclasses import dataclass, asdict
from loguru import logger


@dataclass
class InvoiceSavedEvent:
    """
    Event published when a reviewed invoice is stored.
    """

    invoice_id: str
    invoice_number: str
    vendor: str
    invoice_date: str
    item_count: int
    total: float
    event_type: str = "InvoiceSaved"
    timestamp: Optional[str] = None

    def __post_init__(self):
        """Set timestamp if not provided"""
        if self.timestamp is None:
            self.timestamp = datetime.now(UTC).isoformat()

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class EventPublisher:
    """
    Publishes events to an Azure Service Bus queue.

    Usage:
        from azure.servicebus import ServiceBusClient
        client = ServiceBusClient.from_connection_string(conn_str)
        sender = client.get_queue_sender(queue_name="invoice-events")
        publisher = EventPublisher(service_bus_sender=sender)

        # Disabled mode (no Service Bus configured)
        publisher = EventPublisher(service_bus_sender=None)
    """

    def __init__(
        self,
        service_bus_sender: Optional[object] = None,
        entity_name: str = "invoice-events"
    ):
        """
        Args:
            service_bus_sender: Azure Service Bus sender (ServiceBusSender) or None to disable
            entity_name: Service Bus queue name (default: invoice-events)
        """
        self.service_bus_sender = service_bus_sender
        self.entity_name = entity_name

    def publish_invoice_saved(self, event: InvoiceSavedEvent) -> None:
        """
        Publish an invoice saved event to Service Bus.

        Note:
            If service_bus_sender is None, this is a no-op (disabled mode).
        """
        if self.service_bus_sender is None:
            return

        from azure.servicebus import ServiceBusMessage

        # message_id lets a queue with duplicate detection drop re-sent saves
        message = ServiceBusMessage(
            event.to_json(),
            content_type="application/json",
            subject=event.event_type,
            message_id=event.invoice_id,
        )
        self.service_bus_sender.send_messages(message)
        logger.debug("Published event", event_type=event.event_type, queue=self.entity_name)


def _build_default_publisher() -> EventPublisher:
    from ...core.config import settings

    if not settings.service_bus_connection_string:
        return EventPublisher(service_bus_sender=None)

    from azure.servicebus import ServiceBusClient

    client = ServiceBusClient.from_connection_string(settings.service_bus_connection_string)
    sender = client.get_queue_sender(queue_name=settings.service_bus_queue_name)
    return EventPublisher(service_bus_sender=sender, entity_name=settings.service_bus_queue_name)


_default_publisher: Optional[EventPublisher] = None


def get_event_publisher() -> EventPublisher:
    """
    Get the default event publisher instance, created on first use.

    Returns:
        EventPublisher instance (disabled if Service Bus is not configured)
    """
    global _default_publisher
    if _default_publisher is None:
        _default_publisher = _build_default_publisher()
    return _default_publisher
