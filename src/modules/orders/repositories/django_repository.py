"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

Reads resolve line items and the owning customer explicitly
(``select_related`` + ``prefetch_related``) so serializers never trigger
N+1 queries.

Lifecycle writes are single ``UPDATE`` statements whose ``WHERE`` clause
carries both the ownership predicate (for customer calls) and the
transition guard.  Two concurrent payments on the same order therefore
cannot both succeed: the second one matches zero rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db.models import QuerySet
from django.utils import timezone

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderItem
from modules.orders.pricing import line_total
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _parse_id(value: Any) -> Optional[UUID]:
    """Return ``value`` as a UUID, or ``None`` if it is not one."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (header, then children)
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Order:
        """Persist the order header first, then bulk-insert its items.

        The caller owns the transaction boundary.
        """
        order = Order(
            customer_id=data["customer_id"],
            unit_price=data["unit_price"],
            total_price=data["total_price"],
            delivery=data["delivery"],
            shipping_address=data["shipping_address"],
            payment_method=data["payment_method"],
            payment_date=data["payment_date"],
        )
        order.save()

        items = [
            OrderItem(
                order=order,
                product_id=item["product_id"],
                name=item["name"],
                category=item["category"],
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                total_price=line_total(item["unit_price"], item["quantity"]),
            )
            for item in data["items"]
        ]
        # bulk_create bypasses OrderItem.save(), hence the explicit total.
        OrderItem.objects.bulk_create(items)

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(items),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def queryset(self) -> QuerySet:
        return (
            Order.objects.select_related("customer", "customer__user")
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or malformed IDs.
        """
        order_id = _parse_id(id)
        if order_id is None:
            return None
        return self.queryset().filter(id=order_id).first()

    def get_owned(self, id: str, customer_id: UUID) -> Optional[Order]:
        order_id = _parse_id(id)
        if order_id is None:
            return None
        return self.queryset().filter(id=order_id, customer_id=customer_id).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters and eager-loaded relations.

        Supported filter keys are any ``Order`` field lookups, e.g.
        ``customer_id``, ``status``, ``payment_status``.
        """
        queryset = self.queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def latest_for_customer(self, customer_id: UUID) -> Optional[Order]:
        return self.queryset().filter(customer_id=customer_id).first()

    def exists(self, id: str, customer_id: Optional[UUID] = None) -> bool:
        order_id = _parse_id(id)
        if order_id is None:
            return False
        return self._scoped(order_id, customer_id).exists()

    # ------------------------------------------------------------------
    # Guarded transitions
    # ------------------------------------------------------------------

    def mark_paid(
        self,
        id: str,
        pay_by: str,
        paid_at: datetime,
        customer_id: Optional[UUID] = None,
    ) -> bool:
        order_id = _parse_id(id)
        if order_id is None:
            return False
        updated = (
            self._scoped(order_id, customer_id)
            .exclude(payment_status=PaymentStatus.PAID)
            .update(
                payment_status=PaymentStatus.PAID,
                payment_date=paid_at,
                pay_by=pay_by,
                updated_at=timezone.now(),
            )
        )
        return updated == 1

    def mark_completed(self, id: str, customer_id: UUID) -> bool:
        order_id = _parse_id(id)
        if order_id is None:
            return False
        updated = (
            self._scoped(order_id, customer_id)
            .exclude(completed=True)
            .update(
                completed=True,
                status=OrderStatus.COMPLETED,
                updated_at=timezone.now(),
            )
        )
        return updated == 1

    def mark_confirmed(self, id: str, confirmed_by: str, started_at: datetime) -> bool:
        order_id = _parse_id(id)
        if order_id is None:
            return False
        updated = (
            self._scoped(order_id)
            .exclude(status=OrderStatus.CONFIRMED)
            .update(
                status=OrderStatus.CONFIRMED,
                confirmed_by=confirmed_by,
                delivery_start_time=started_at,
                updated_at=timezone.now(),
            )
        )
        return updated == 1

    def mark_cancelled(self, id: str, cancelled_by: str) -> bool:
        order_id = _parse_id(id)
        if order_id is None:
            return False
        updated = (
            self._scoped(order_id)
            .exclude(status=OrderStatus.CANCELLED)
            .update(
                status=OrderStatus.CANCELLED,
                cancelled_by=cancelled_by,
                updated_at=timezone.now(),
            )
        )
        return updated == 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _scoped(order_id: UUID, customer_id: Optional[UUID] = None) -> QuerySet:
        queryset = Order.objects.filter(id=order_id)
        if customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)
        return queryset
