from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.core.authentication import Actor
from modules.customers.models import Customer
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, PaymentMethodEnum
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderBuilder, OrderLifecycleManager

CATALOG = [
    ("SKU-TEA-01", "Green Tea 100g", "Beverages", Decimal("10.00")),
    ("SKU-COF-01", "Espresso Beans 250g", "Beverages", Decimal("14.50")),
    ("SKU-BRD-01", "Sourdough Loaf", "Bakery", Decimal("5.00")),
    ("SKU-HON-01", "Wildflower Honey", "Pantry", Decimal("8.90")),
    ("SKU-OIL-01", "Olive Oil 500ml", "Pantry", Decimal("12.00")),
]

CUSTOMERS = [
    ("alice", "Alice Martin", "alice@example.com", "+1-555-0101"),
    ("bob", "Bob Carter", "bob@example.com", "+1-555-0102"),
]


class Command(BaseCommand):
    help = "Seed database with an admin, two customers and sample orders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders",
            type=int,
            default=3,
            help="Orders to create per customer (default: 3).",
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        admin = self._seed_admin()
        customers = self._seed_customers()
        orders_created = self._seed_orders(customers, admin, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_admin(self):
        User = get_user_model()
        admin = User.objects.filter(username="admin").first()
        if admin is None:
            admin = User.objects.create_superuser(
                "admin", email="admin@example.com", password="admin123"
            )
        return admin

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        User = get_user_model()
        customers: list[Customer] = []
        for username, name, email, phone in CUSTOMERS:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username, email=email, password=f"{username}123"
                )
            customer, _ = Customer.objects.get_or_create(
                user=user,
                defaults={"name": name, "email": email, "phone": phone},
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_orders(self, customers: list[Customer], admin, per_customer: int) -> int:
        self.stdout.write("Creating orders...")
        repository = OrderDjangoRepository()
        builder = OrderBuilder(order_repository=repository)
        lifecycle = OrderLifecycleManager(order_repository=repository)
        admin_actor = Actor.from_user(admin)

        orders_created = 0
        for customer in customers:
            if customer.orders.exists():
                continue
            actor = Actor.from_user(customer.user)
            for _ in range(per_customer):
                lines = random.sample(CATALOG, k=random.randint(1, 3))
                dto = CreateOrderDTO(
                    customer_id=customer.id,
                    items=[
                        CreateOrderItemDTO(
                            product_id=product_id,
                            name=name,
                            category=category,
                            quantity=random.randint(1, 3),
                            unit_price=price,
                        )
                        for product_id, name, category, price in lines
                    ],
                    shipping_address=f"{random.randint(1, 999)} Market Street",
                    payment_method=random.choice(list(PaymentMethodEnum)),
                )
                order = builder.create_order(dto, actor=actor)
                orders_created += 1

                # Spread the samples across the lifecycle.
                step = orders_created % 3
                if step >= 1:
                    lifecycle.confirm_order(str(order.id), admin_actor)
                if step == 2:
                    lifecycle.pay_as_customer(str(order.id), actor)
                    lifecycle.complete_order(str(order.id), actor)

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
