"""Order service layer (Use Cases).

Two application services share the order repository:

- ``OrderBuilder`` turns a validated cart into a persisted order.
- ``OrderLifecycleManager`` applies lifecycle transitions and answers
  read queries on behalf of an ``Actor``.

All writes are atomic; the service defines the unit-of-work boundary.
Domain events are published only after the surrounding transaction
commits, so subscribers never observe rolled-back state.

Business rules enforced:
- Totals are computed by ``modules.orders.pricing.compute_totals``.
- Status and payment status move independently of each other.
- Customer operations are scoped to the caller's own orders; a foreign
  order is reported exactly like a missing one.
- Every transition guard lives in the conditional ``UPDATE`` so that
  concurrent requests cannot both succeed.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.orders.constants import MAX_AMOUNT
from modules.orders.events import (
    OrderCancelled,
    OrderCompleted,
    OrderConfirmed,
    OrderCreated,
    OrderEvent,
    OrderPaid,
)
from modules.orders.exceptions import (
    ActionNotAllowed,
    NoOrdersFound,
    OrderAlreadyCancelled,
    OrderAlreadyCompleted,
    OrderAlreadyConfirmed,
    OrderAlreadyPaid,
    OrderNotFound,
    OrderTotalTooLarge,
)
from modules.orders.pricing import compute_totals
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.core.authentication import Actor
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


def _as_uuid(order_id: Any) -> UUID:
    return order_id if isinstance(order_id, UUID) else UUID(str(order_id))


def _publish_on_commit(bus: IEventBus, event: OrderEvent) -> None:
    transaction.on_commit(lambda: bus.publish(event))


class OrderBuilder:
    """Creates orders from a customer's cart.

    Receives the repository via constructor injection (DIP).  The delivery
    fee defaults to ``settings.ORDERS_DELIVERY_FEE``.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        delivery_fee: Optional[Decimal] = None,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._delivery_fee = (
            delivery_fee if delivery_fee is not None else settings.ORDERS_DELIVERY_FEE
        )
        self._event_bus = event_bus or default_event_bus

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, actor: Optional[Actor] = None) -> Order:
        """Price the cart and persist the order with its line items.

        Steps:
        1. Compute header totals from the submitted lines.
        2. Insert the header, then bulk-insert the items.
        3. Re-fetch the order with items and customer resolved.

        Any failure rolls back the whole order; nothing is left half-written.

        Raises:
            OrderTotalTooLarge: if the priced cart exceeds ``MAX_AMOUNT``.
        """
        log = logger.bind(customer_id=str(dto.customer_id))
        log.info("order.creation_started", item_count=len(dto.items))

        if dto.payment_proof:
            log.info("order.payment_proof_received", payment_proof=dto.payment_proof)

        totals = compute_totals(dto.items, delivery=self._delivery_fee)
        if totals.total_price > MAX_AMOUNT:
            log.warning(
                "order.creation_rejected",
                reason="total_too_large",
                total_price=str(totals.total_price),
            )
            raise OrderTotalTooLarge(f"Order total cannot exceed {MAX_AMOUNT}.")

        order = self._order_repo.create(
            {
                "customer_id": dto.customer_id,
                "unit_price": totals.unit_price,
                "total_price": totals.total_price,
                "delivery": totals.delivery,
                "shipping_address": dto.shipping_address,
                "payment_method": dto.payment_method.value,
                "payment_date": timezone.now(),
                "items": [item.model_dump() for item in dto.items],
            }
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            unit_price=str(totals.unit_price),
            total_price=str(totals.total_price),
        )
        _publish_on_commit(
            self._event_bus,
            OrderCreated(
                aggregate_id=order.id,
                actor=actor.customer_tag if actor else "",
            ),
        )

        # Re-fetch with prefetch for output
        return self._order_repo.get_by_id(str(order.id)) or order


class OrderLifecycleManager:
    """Applies lifecycle transitions and read queries for an ``Actor``.

    ``strict_admin_transitions`` decides what a repeated confirm/cancel
    does: ``False`` returns the order unchanged, ``True`` raises a
    conflict.  Defaults to ``settings.ORDERS_STRICT_ADMIN_TRANSITIONS``.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        strict_admin_transitions: Optional[bool] = None,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._strict = (
            strict_admin_transitions
            if strict_admin_transitions is not None
            else settings.ORDERS_STRICT_ADMIN_TRANSITIONS
        )
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Admin transitions
    # ------------------------------------------------------------------

    @transaction.atomic
    def confirm_order(self, order_id: str, actor: Actor) -> Order:
        """Mark the order confirmed and start its delivery clock.

        Raises:
            ActionNotAllowed: actor is not an admin.
            OrderNotFound: order does not exist.
            OrderAlreadyConfirmed: repeat call in strict mode.
        """
        self._require_admin(actor, "confirm")
        log = logger.bind(order_id=str(order_id), actor=actor.admin_tag)

        if self._order_repo.mark_confirmed(
            order_id, confirmed_by=actor.username, started_at=timezone.now()
        ):
            log.info("order.confirmed")
            _publish_on_commit(
                self._event_bus,
                OrderConfirmed(aggregate_id=_as_uuid(order_id), actor=actor.admin_tag),
            )
            return self._get_or_raise(order_id)

        return self._repeat_admin_transition(
            order_id, log, "order.confirm_repeated", OrderAlreadyConfirmed
        )

    @transaction.atomic
    def cancel_order(self, order_id: str, actor: Actor) -> Order:
        """Mark the order cancelled.

        Raises:
            ActionNotAllowed: actor is not an admin.
            OrderNotFound: order does not exist.
            OrderAlreadyCancelled: repeat call in strict mode.
        """
        self._require_admin(actor, "cancel")
        log = logger.bind(order_id=str(order_id), actor=actor.admin_tag)

        if self._order_repo.mark_cancelled(order_id, cancelled_by=actor.username):
            log.info("order.cancelled")
            _publish_on_commit(
                self._event_bus,
                OrderCancelled(aggregate_id=_as_uuid(order_id), actor=actor.admin_tag),
            )
            return self._get_or_raise(order_id)

        return self._repeat_admin_transition(
            order_id, log, "order.cancel_repeated", OrderAlreadyCancelled
        )

    @transaction.atomic
    def pay_as_admin(self, order_id: str, actor: Actor) -> Order:
        """Record payment on any order on the customer's behalf.

        Raises:
            ActionNotAllowed: actor is not an admin.
            OrderNotFound: order does not exist.
            OrderAlreadyPaid: the order was already paid.
        """
        self._require_admin(actor, "pay")
        return self._pay(order_id, pay_by=actor.admin_tag)

    # ------------------------------------------------------------------
    # Customer transitions
    # ------------------------------------------------------------------

    @transaction.atomic
    def pay_as_customer(self, order_id: str, actor: Actor) -> Order:
        """Record payment on one of the caller's own orders.

        Raises:
            ActionNotAllowed: actor has no customer profile.
            OrderNotFound: order does not exist or belongs to someone else.
            OrderAlreadyPaid: the order was already paid.
        """
        self._require_customer(actor, "pay")
        return self._pay(
            order_id, pay_by=actor.customer_tag, customer_id=actor.customer_id
        )

    @transaction.atomic
    def complete_order(self, order_id: str, actor: Actor) -> Order:
        """Mark one of the caller's own orders as received.

        Raises:
            ActionNotAllowed: actor has no customer profile.
            OrderNotFound: order does not exist or belongs to someone else.
            OrderAlreadyCompleted: the order was already completed.
        """
        self._require_customer(actor, "complete")
        log = logger.bind(order_id=str(order_id), actor=actor.customer_tag)

        if self._order_repo.mark_completed(order_id, customer_id=actor.customer_id):
            log.info("order.completed")
            _publish_on_commit(
                self._event_bus,
                OrderCompleted(
                    aggregate_id=_as_uuid(order_id),
                    actor=actor.customer_tag,
                ),
            )
            return self._get_or_raise(order_id, customer_id=actor.customer_id)

        if not self._order_repo.exists(order_id, customer_id=actor.customer_id):
            log.warning("order.complete_rejected", reason="not_found")
            raise OrderNotFound(f"Order {order_id} not found.")

        log.warning("order.complete_rejected", reason="already_completed")
        raise OrderAlreadyCompleted(f"Order {order_id} is already completed.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def orders_queryset(self) -> QuerySet:
        """Unevaluated queryset of all orders, for filter backends."""
        return self._order_repo.queryset()

    def list_customer_orders(self, actor: Actor) -> List[Order]:
        """Return the caller's own orders, newest first."""
        self._require_customer(actor, "list")
        return self._order_repo.list({"customer_id": actor.customer_id})

    def get_order(self, order_id: str) -> Order:
        """Retrieve any order by ID (admin view).

        Raises:
            OrderNotFound: if the order does not exist.
        """
        return self._get_or_raise(order_id)

    def get_customer_order(self, order_id: str, actor: Actor) -> Order:
        """Retrieve one of the caller's own orders.

        Raises:
            OrderNotFound: missing, malformed id, or owned by someone else.
        """
        self._require_customer(actor, "view")
        return self._get_or_raise(order_id, customer_id=actor.customer_id)

    def get_last_order(self, actor: Actor) -> Order:
        """Return the caller's most recent order.

        Raises:
            NoOrdersFound: the caller has never ordered.
        """
        self._require_customer(actor, "view")
        order = self._order_repo.latest_for_customer(actor.customer_id)
        if order is None:
            raise NoOrdersFound("No orders found.")
        return order

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pay(
        self, order_id: str, pay_by: str, customer_id: Optional[UUID] = None
    ) -> Order:
        log = logger.bind(order_id=str(order_id), pay_by=pay_by)

        if self._order_repo.mark_paid(
            order_id, pay_by=pay_by, paid_at=timezone.now(), customer_id=customer_id
        ):
            log.info("order.paid")
            _publish_on_commit(
                self._event_bus,
                OrderPaid(aggregate_id=_as_uuid(order_id), actor=pay_by),
            )
            return self._get_or_raise(order_id, customer_id=customer_id)

        if not self._order_repo.exists(order_id, customer_id=customer_id):
            log.warning("order.pay_rejected", reason="not_found")
            raise OrderNotFound(f"Order {order_id} not found.")

        log.warning("order.pay_rejected", reason="already_paid")
        raise OrderAlreadyPaid(f"Order {order_id} is already paid.")

    def _repeat_admin_transition(
        self,
        order_id: str,
        log: Any,
        event: str,
        conflict: Callable[[str], Exception],
    ) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            log.warning(event, reason="not_found")
            raise OrderNotFound(f"Order {order_id} not found.")
        if self._strict:
            log.warning(event, reason="conflict", status=order.status)
            raise conflict(f"Order {order_id} is already {order.status}.")
        log.info(event, reason="noop", status=order.status)
        return order

    def _get_or_raise(
        self, order_id: str, customer_id: Optional[UUID] = None
    ) -> Order:
        if customer_id is not None:
            order = self._order_repo.get_owned(order_id, customer_id)
        else:
            order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @staticmethod
    def _require_admin(actor: Actor, action: str) -> None:
        if not actor.is_admin:
            logger.warning(
                "order.action_denied", action=action, username=actor.username
            )
            raise ActionNotAllowed(f"Only admins can {action} orders.")

    @staticmethod
    def _require_customer(actor: Actor, action: str) -> None:
        if not actor.is_customer:
            logger.warning(
                "order.action_denied", action=action, username=actor.username
            )
            raise ActionNotAllowed(f"Only customers can {action} their orders.")
