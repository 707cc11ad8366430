"""Order and OrderItem models.

Business rules implemented:
- Totals are computed once by the Order Builder (``modules.orders.pricing``)
  and stored on the header; line items keep their own ``total_price``.
- ``status`` and ``payment_status`` are independent; transitions are
  applied by the Lifecycle Manager through guarded conditional updates.
- ``completed`` mirrors ``status == completed`` for the completion
  transition; later admin transitions do not reset it.
- Customer FK uses PROTECT to preserve financial history.
- Orders are never deleted.
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    DELIVERY_FEE,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from modules.orders.pricing import ZERO, line_total


class Order(BaseModel):
    """Order aggregate root.

    ``id`` is a UUIDv7, so ``(-created_at, -id)`` is a stable newest-first
    ordering.  ``payment_date`` is stamped at creation as a placeholder and
    overwritten when the order is actually paid.
    """

    customer: models.ForeignKey = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=ZERO,
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=ZERO,
    )
    delivery: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=DELIVERY_FEE,
    )
    shipping_address: models.TextField = models.TextField()
    payment_method: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_date: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    pay_by: models.CharField = models.CharField(max_length=160, blank=True, default="")
    confirmed_by: models.CharField = models.CharField(
        max_length=150, blank=True, default=""
    )
    cancelled_by: models.CharField = models.CharField(
        max_length=150, blank=True, default=""
    )
    delivery_start_time: models.DateTimeField = models.DateTimeField(
        null=True, blank=True
    )
    completed: models.BooleanField = models.BooleanField(default=False)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["customer", "-created_at"],
                name="orders_customer_created_idx",
            ),
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status}/{self.payment_status})"


class OrderItem(BaseModel):
    """One purchased product within an order.

    ``product_id``, ``name`` and ``category`` are copied from the cart as
    submitted; there is no product catalogue behind them.  ``total_price``
    is always ``unit_price * quantity`` and never includes delivery.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id: models.CharField = models.CharField(max_length=64)
    name: models.CharField = models.CharField(max_length=255)
    category: models.CharField = models.CharField(max_length=120)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(ZERO)],
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def refresh_total(self) -> None:
        self.total_price = line_total(self.unit_price, self.quantity)

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.refresh_total()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity} (${self.total_price})"
