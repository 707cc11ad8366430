"""Cart pricing.

``compute_totals`` reproduces the storefront's historical pricing policy:
the delivery fee is added once **per line item**, not once per order, and
the order-level ``unit_price`` is the plain sum of line unit prices (not
weighted by quantity).  Both are observable in every stored order, so they
are kept as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol

from modules.orders.constants import DELIVERY_FEE

ZERO = Decimal("0.00")


class PricedLine(Protocol):
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class OrderTotals:
    unit_price: Decimal
    total_price: Decimal
    delivery: Decimal


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Price of one line: ``unit_price * quantity`` (never includes delivery)."""
    return unit_price * quantity


def compute_totals(
    items: Iterable[PricedLine], delivery: Decimal = DELIVERY_FEE
) -> OrderTotals:
    total_price = ZERO
    unit_price = ZERO
    for item in items:
        total_price += line_total(item.unit_price, item.quantity) + delivery
        unit_price += item.unit_price
    return OrderTotals(
        unit_price=unit_price,
        total_price=total_price,
        delivery=delivery,
    )
