from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.core.authentication import Actor
from modules.customers.models import Customer
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderBuilder, OrderLifecycleManager

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users and actors
# ---------------------------------------------------------------------------


def make_customer(username: str, email: str) -> Customer:
    user = User.objects.create_user(username=username, password="testpass123")
    return Customer.objects.create(user=user, name=username.title(), email=email)


@pytest.fixture()
def customer() -> Customer:
    return make_customer("alice", "alice@example.com")


@pytest.fixture()
def other_customer() -> Customer:
    return make_customer("bob", "bob@example.com")


@pytest.fixture()
def admin_user():
    return User.objects.create_user(
        username="root", password="testpass123", is_staff=True
    )


@pytest.fixture()
def customer_actor(customer) -> Actor:
    return Actor.from_user(customer.user)


@pytest.fixture()
def other_actor(other_customer) -> Actor:
    return Actor.from_user(other_customer.user)


@pytest.fixture()
def admin_actor(admin_user) -> Actor:
    return Actor.from_user(admin_user)


@pytest.fixture()
def customer_client(customer) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=customer.user)
    return client


@pytest.fixture()
def other_client(other_customer) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=other_customer.user)
    return client


@pytest.fixture()
def admin_client(admin_user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def make_order_dto(customer: Customer, **overrides) -> CreateOrderDTO:
    """The reference cart: 2 x 10.00 tea and 1 x 5.00 bread."""
    data = {
        "customer_id": customer.id,
        "items": [
            CreateOrderItemDTO(
                product_id="SKU-TEA",
                name="Green Tea",
                category="Beverages",
                quantity=2,
                unit_price=Decimal("10.00"),
            ),
            CreateOrderItemDTO(
                product_id="SKU-BREAD",
                name="Sourdough",
                category="Bakery",
                quantity=1,
                unit_price=Decimal("5.00"),
            ),
        ],
        "shipping_address": "12 Market Street",
        "payment_method": "delivery",
    }
    data.update(overrides)
    return CreateOrderDTO(**data)


@pytest.fixture()
def order_dto():
    """Factory for the reference cart DTO, with keyword overrides."""
    return make_order_dto


@pytest.fixture()
def order_repository() -> OrderDjangoRepository:
    return OrderDjangoRepository()


@pytest.fixture()
def builder(order_repository) -> OrderBuilder:
    return OrderBuilder(order_repository=order_repository)


@pytest.fixture()
def lifecycle(order_repository) -> OrderLifecycleManager:
    return OrderLifecycleManager(
        order_repository=order_repository, strict_admin_transitions=False
    )


@pytest.fixture()
def strict_lifecycle(order_repository) -> OrderLifecycleManager:
    return OrderLifecycleManager(
        order_repository=order_repository, strict_admin_transitions=True
    )


@pytest.fixture()
def order(builder, customer, customer_actor):
    return builder.create_order(make_order_dto(customer), actor=customer_actor)


@pytest.fixture()
def order_payload() -> dict:
    return {
        "items": [
            {
                "product_id": "SKU-TEA",
                "name": "Green Tea",
                "category": "Beverages",
                "quantity": 2,
                "unit_price": "10.00",
            },
            {
                "product_id": "SKU-BREAD",
                "name": "Sourdough",
                "category": "Bakery",
                "quantity": 1,
                "unit_price": "5.00",
            },
        ],
        "shipping_address": "12 Market Street",
        "payment_method": "delivery",
    }
