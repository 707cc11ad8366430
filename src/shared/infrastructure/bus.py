"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Handlers subscribed to a base event class also receive its subclasses,
    walking the event's MRO from the most specific class outwards.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(
        self, event_class: Type[DomainEvent], handler: IEventHandler
    ) -> None:
        handlers = self._handlers.get(event_class, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event: DomainEvent) -> List[IEventHandler]:
        matched: List[IEventHandler] = []
        for klass in type(event).__mro__:
            for handler in self._handlers.get(klass, []):
                if handler not in matched:
                    matched.append(handler)
        return matched

    def publish(self, event: DomainEvent) -> None:
        handlers = self.handlers_for(event)
        logger.debug(
            "event_bus.publish",
            event_name=event.event_name,
            handler_count=len(handlers),
        )
        for handler in handlers:
            handler.handle(event)


# Global bus instance (singleton)

event_bus = InMemoryEventBus()
