"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderEvent(DomainEvent):
    """Base for order events; ``actor`` is the tag of whoever caused it."""

    actor: str = ""


@dataclass(frozen=True)
class OrderCreated(OrderEvent):
    """Raised when an order is created."""


@dataclass(frozen=True)
class OrderPaid(OrderEvent):
    """Raised when an order's payment is recorded."""


@dataclass(frozen=True)
class OrderConfirmed(OrderEvent):
    """Raised when an admin confirms an order."""


@dataclass(frozen=True)
class OrderCancelled(OrderEvent):
    """Raised when an admin cancels an order."""


@dataclass(frozen=True)
class OrderCompleted(OrderEvent):
    """Raised when a customer marks an order as received."""
