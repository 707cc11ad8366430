"""Integration tests for the admin order endpoints.

Covers:
- GET /api/v1/admin/orders/ with django-filter filters.
- GET /api/v1/admin/orders/{id}/ including customer email and the
  malformed-id 400 (also on confirm, cancel and pay).
- PUT confirm / cancel (no-op and strict repeat), POST pay.
- Customers are forbidden from every admin endpoint.
"""

from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.integration

ADMIN_URL = "/api/v1/admin/orders/"


@pytest.fixture()
def two_orders(builder, customer, other_customer, order_dto):
    first = builder.create_order(order_dto(customer))
    second = builder.create_order(order_dto(other_customer, payment_method="pickup"))
    return first, second


class TestAdminReads:
    def test_list_all_orders_newest_first(self, admin_client, two_orders):
        first, second = two_orders

        response = admin_client.get(ADMIN_URL)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [str(second.id), str(first.id)]

    @pytest.mark.parametrize(
        "query, expected",
        [
            ({"payment_method": "pickup"}, [1]),
            ({"payment_method": "delivery"}, [0]),
            ({"status": "pending"}, [1, 0]),
            ({"status": "cancelled"}, []),
        ],
    )
    def test_list_filters(self, admin_client, two_orders, query, expected):
        response = admin_client.get(ADMIN_URL, query)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [
            str(two_orders[i].id) for i in expected
        ]

    def test_filter_by_customer_and_payment_status(
        self, admin_client, two_orders, other_customer, lifecycle, admin_actor
    ):
        lifecycle.pay_as_admin(str(two_orders[1].id), admin_actor)

        by_customer = admin_client.get(ADMIN_URL, {"customer": str(other_customer.id)})
        paid = admin_client.get(ADMIN_URL, {"payment_status": "paid"})

        assert [o["id"] for o in by_customer.json()] == [str(two_orders[1].id)]
        assert [o["id"] for o in paid.json()] == [str(two_orders[1].id)]

    def test_invalid_filter_value_is_rejected(self, admin_client, two_orders):
        response = admin_client.get(ADMIN_URL, {"status": "shipped"})
        assert response.status_code == 400

    def test_retrieve_includes_customer_email(self, admin_client, order):
        response = admin_client.get(f"{ADMIN_URL}{order.id}/")

        assert response.status_code == 200
        assert response.json()["customer_email"] == "alice@example.com"
        assert len(response.json()["items"]) == 2

    def test_retrieve_malformed_id(self, admin_client):
        response = admin_client.get(f"{ADMIN_URL}not-a-uuid/")

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid order ID"}

    def test_retrieve_missing_order(self, admin_client):
        response = admin_client.get(f"{ADMIN_URL}{uuid.uuid4()}/")
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "method, action", [("put", "confirm"), ("put", "cancel"), ("post", "pay")]
    )
    def test_transition_malformed_id(self, admin_client, method, action):
        response = getattr(admin_client, method)(f"{ADMIN_URL}{action}/not-a-uuid/")

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid order ID"}

    @pytest.mark.parametrize(
        "method, action", [("put", "confirm"), ("put", "cancel"), ("post", "pay")]
    )
    def test_transition_missing_order(self, admin_client, method, action):
        response = getattr(admin_client, method)(
            f"{ADMIN_URL}{action}/{uuid.uuid4()}/"
        )

        assert response.status_code == 404


class TestAdminTransitions:
    def test_confirm(self, admin_client, order):
        response = admin_client.put(f"{ADMIN_URL}confirm/{order.id}/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "confirmed"
        assert data["confirmed_by"] == "root"
        assert data["delivery_start_time"] is not None

    def test_confirm_twice_is_noop(self, admin_client, order):
        first = admin_client.put(f"{ADMIN_URL}confirm/{order.id}/")
        second = admin_client.put(f"{ADMIN_URL}confirm/{order.id}/")

        assert second.status_code == 200
        assert (
            second.json()["delivery_start_time"]
            == first.json()["delivery_start_time"]
        )

    def test_confirm_twice_conflicts_when_strict(self, admin_client, order, settings):
        settings.ORDERS_STRICT_ADMIN_TRANSITIONS = True

        admin_client.put(f"{ADMIN_URL}confirm/{order.id}/")
        response = admin_client.put(f"{ADMIN_URL}confirm/{order.id}/")

        assert response.status_code == 409

    def test_cancel(self, admin_client, order):
        response = admin_client.put(f"{ADMIN_URL}cancel/{order.id}/")

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancelled_by"] == "root"

    def test_cancel_twice_conflicts_when_strict(self, admin_client, order, settings):
        settings.ORDERS_STRICT_ADMIN_TRANSITIONS = True

        admin_client.put(f"{ADMIN_URL}cancel/{order.id}/")
        response = admin_client.put(f"{ADMIN_URL}cancel/{order.id}/")

        assert response.status_code == 409

    def test_pay(self, admin_client, order):
        response = admin_client.post(f"{ADMIN_URL}pay/{order.id}/")

        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"
        assert response.json()["pay_by"] == "admin:root"

    def test_pay_twice_conflicts(self, admin_client, order):
        admin_client.post(f"{ADMIN_URL}pay/{order.id}/")
        response = admin_client.post(f"{ADMIN_URL}pay/{order.id}/")

        assert response.status_code == 409

    @pytest.mark.parametrize(
        "method, action", [("put", "confirm"), ("put", "cancel"), ("post", "pay")]
    )
    def test_missing_order(self, admin_client, method, action):
        response = getattr(admin_client, method)(
            f"{ADMIN_URL}{action}/{uuid.uuid4()}/"
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Order not found."}


class TestAdminPermissions:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", ""),
            ("get", "{id}/"),
            ("put", "confirm/{id}/"),
            ("put", "cancel/{id}/"),
            ("post", "pay/{id}/"),
        ],
    )
    def test_customer_is_forbidden(self, customer_client, order, method, path):
        url = ADMIN_URL + path.format(id=order.id)

        response = getattr(customer_client, method)(url)

        assert response.status_code == 403
        order.refresh_from_db()
        assert order.status == "pending"
        assert order.payment_status == "pending"

    def test_anonymous_is_unauthorized(self, api_client):
        assert api_client.get(ADMIN_URL).status_code == 401
