"""Unit tests for OrderDjangoRepository.

Focus on the conditional updates: the guard and the ownership predicate
live in the ``WHERE`` clause, so a second attempt matches zero rows.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order
from modules.orders.repositories.django_repository import _parse_id

pytestmark = pytest.mark.unit


class TestParseId:
    def test_accepts_uuid_and_string(self):
        value = uuid.uuid4()
        assert _parse_id(value) is value
        assert _parse_id(str(value)) == value

    @pytest.mark.parametrize("value", ["", "123", "not-a-uuid", None])
    def test_rejects_malformed(self, value):
        assert _parse_id(value) is None


class TestCreate:
    def test_create_writes_header_then_items(self, order_repository, customer):
        order = order_repository.create(
            {
                "customer_id": customer.id,
                "unit_price": Decimal("3.00"),
                "total_price": Decimal("8.00"),
                "delivery": Decimal("2.00"),
                "shipping_address": "1 Main Street",
                "payment_method": "pickup",
                "payment_date": timezone.now(),
                "items": [
                    {
                        "product_id": "SKU-1",
                        "name": "Tea",
                        "category": "Beverages",
                        "quantity": 2,
                        "unit_price": Decimal("3.00"),
                    }
                ],
            }
        )

        stored = Order.objects.get(id=order.id)
        item = stored.items.get()
        assert stored.total_price == Decimal("8.00")
        assert item.total_price == Decimal("6.00")


class TestReads:
    def test_get_by_id_resolves_relations(
        self, order_repository, order, django_assert_num_queries
    ):
        with django_assert_num_queries(2):
            fetched = order_repository.get_by_id(str(order.id))
            assert fetched.customer.user.username == "alice"
            assert len(fetched.items.all()) == 2

    def test_get_by_id_malformed_returns_none(self, order_repository):
        assert order_repository.get_by_id("nope") is None

    def test_get_owned_scopes_by_customer(
        self, order_repository, order, customer, other_customer
    ):
        assert order_repository.get_owned(str(order.id), customer.id) == order
        assert order_repository.get_owned(str(order.id), other_customer.id) is None

    def test_exists_with_and_without_owner(
        self, order_repository, order, customer, other_customer
    ):
        assert order_repository.exists(str(order.id))
        assert order_repository.exists(str(order.id), customer.id)
        assert not order_repository.exists(str(order.id), other_customer.id)
        assert not order_repository.exists("bad-id")

    def test_latest_for_customer(
        self, order_repository, builder, order, customer, other_customer, order_dto
    ):
        newer = builder.create_order(order_dto(customer))
        builder.create_order(order_dto(other_customer))

        assert order_repository.latest_for_customer(customer.id).id == newer.id

    def test_list_with_filters(self, order_repository, order, customer, other_customer):
        assert order_repository.list({"customer_id": customer.id}) == [order]
        assert order_repository.list({"customer_id": other_customer.id}) == []


class TestConditionalUpdates:
    def test_mark_paid_succeeds_once(self, order_repository, order):
        now = timezone.now()

        assert order_repository.mark_paid(str(order.id), "admin:root", now) is True
        assert order_repository.mark_paid(str(order.id), "admin:other", now) is False

        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.PAID
        assert order.pay_by == "admin:root"

    def test_mark_paid_respects_owner(self, order_repository, order, other_customer):
        assert (
            order_repository.mark_paid(
                str(order.id),
                "customer:bob",
                timezone.now(),
                customer_id=other_customer.id,
            )
            is False
        )
        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.PENDING

    def test_mark_completed_succeeds_once(self, order_repository, order, customer):
        assert order_repository.mark_completed(str(order.id), customer.id) is True
        assert order_repository.mark_completed(str(order.id), customer.id) is False

        order.refresh_from_db()
        assert order.completed is True
        assert order.status == OrderStatus.COMPLETED

    def test_mark_confirmed_keeps_first_start_time(self, order_repository, order):
        first = timezone.now()
        assert order_repository.mark_confirmed(str(order.id), "root", first) is True
        assert (
            order_repository.mark_confirmed(str(order.id), "other", timezone.now())
            is False
        )

        order.refresh_from_db()
        assert order.delivery_start_time == first
        assert order.confirmed_by == "root"

    def test_mark_cancelled_succeeds_once(self, order_repository, order):
        assert order_repository.mark_cancelled(str(order.id), "root") is True
        assert order_repository.mark_cancelled(str(order.id), "root") is False

    def test_conditional_update_bumps_updated_at(self, order_repository, order):
        before = order.updated_at
        order_repository.mark_cancelled(str(order.id), "root")
        order.refresh_from_db()
        assert order.updated_at > before

    @pytest.mark.parametrize("method", ["mark_confirmed", "mark_cancelled"])
    def test_malformed_id_matches_nothing(self, order_repository, method):
        args = ("root", timezone.now()) if method == "mark_confirmed" else ("root",)
        assert getattr(order_repository, method)("garbage", *args) is False
