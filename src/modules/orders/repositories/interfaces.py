"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order Builder and the
Lifecycle Manager need: header + line item creation, owner-scoped reads,
and guarded single-statement transitions.

Every ``mark_*`` method is a conditional update: the transition guard is
part of the ``WHERE`` clause and the return value says whether a row
matched.  Callers use ``exists`` afterwards to tell "not found" from
"already in that state".
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    # Creation ----------------------------------------------------------

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert the order header, then its line items in one batch.

        ``data`` must include ``customer_id``, ``unit_price``,
        ``total_price``, ``delivery``, ``shipping_address``,
        ``payment_method``, ``payment_date`` and ``items`` (dicts with
        ``product_id``, ``name``, ``category``, ``quantity``,
        ``unit_price``).
        """

    # Reads -------------------------------------------------------------

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its items and customer resolved."""

    @abstractmethod
    def get_owned(self, id: str, customer_id: UUID) -> Optional[Order]:
        """Retrieve an order only if it belongs to ``customer_id``."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders newest first, optionally filtered."""

    @abstractmethod
    def queryset(self) -> QuerySet:
        """Unevaluated newest-first queryset for filter backends."""

    @abstractmethod
    def latest_for_customer(self, customer_id: UUID) -> Optional[Order]:
        """Most recently created order of a customer, items resolved."""

    @abstractmethod
    def exists(self, id: str, customer_id: Optional[UUID] = None) -> bool:
        """Whether the order exists (and is owned, when scoped)."""

    # Guarded transitions -------------------------------------------------

    @abstractmethod
    def mark_paid(
        self,
        id: str,
        pay_by: str,
        paid_at: datetime,
        customer_id: Optional[UUID] = None,
    ) -> bool:
        """Set ``payment_status=paid`` unless it already is."""

    @abstractmethod
    def mark_completed(self, id: str, customer_id: UUID) -> bool:
        """Set ``completed=True`` / ``status=completed`` unless completed."""

    @abstractmethod
    def mark_confirmed(self, id: str, confirmed_by: str, started_at: datetime) -> bool:
        """Set ``status=confirmed`` unless it already is."""

    @abstractmethod
    def mark_cancelled(self, id: str, cancelled_by: str) -> bool:
        """Set ``status=cancelled`` unless it already is."""
