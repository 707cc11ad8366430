"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderEvent
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderAuditLogHandler(IEventHandler[OrderEvent]):
    """Writes one audit line per order lifecycle event."""

    def handle(self, event: OrderEvent) -> None:
        logger.info(
            "order.audit",
            order_event=event.event_name,
            order_id=str(event.aggregate_id),
            actor=event.actor,
            event_id=str(event.event_id),
            occurred_on=event.occurred_on.isoformat(),
        )


order_audit_log_handler = OrderAuditLogHandler()
