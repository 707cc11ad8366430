"""Order domain constants.

Status and payment status are two independent axes: no transition table
ties them together, so e.g. a cancelled order can still be marked paid.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"
    COMPLETED = "completed", "Completed"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"


class PaymentMethod(models.TextChoices):
    DELIVERY = "delivery", "Pay on delivery"
    PICKUP = "pickup", "Pay on pickup"


# Flat surcharge; see ``modules.orders.pricing`` for how it accumulates.
DELIVERY_FEE = Decimal("2.00")

PAYMENT_PROOF_UPLOAD_DIR = "payment_proofs"

# Bounds imposed by the ``DecimalField(max_digits=10, decimal_places=2)``
# price columns and a sane cart line.
MAX_QUANTITY = 10_000
MAX_AMOUNT = Decimal("99999999.99")
