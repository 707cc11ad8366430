"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one cart line as submitted by the customer.
- ``CreateOrderDTO``: a whole cart submission.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import MAX_AMOUNT, MAX_QUANTITY
from modules.orders.pricing import line_total


class PaymentMethodEnum(StrEnum):
    """How the customer intends to pay (framework-agnostic mirror of
    ``PaymentMethod``)."""

    DELIVERY = "delivery"
    PICKUP = "pickup"


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single cart line.

    Name, category and price come from the storefront cart; the order
    service does not look them up anywhere.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=120)
    quantity: int
    unit_price: Decimal

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        if v > MAX_QUANTITY:
            raise ValueError(f"Quantity cannot exceed {MAX_QUANTITY}.")
        return v

    @field_validator("unit_price")
    @classmethod
    def unit_price_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Unit price cannot be negative.")
        return v

    @model_validator(mode="after")
    def line_total_must_fit(self) -> CreateOrderItemDTO:
        if line_total(self.unit_price, self.quantity) > MAX_AMOUNT:
            raise ValueError(f"Line total cannot exceed {MAX_AMOUNT}.")
        return self


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one line.
    - ``shipping_address`` must not be blank.
    - ``payment_method`` must be ``delivery`` or ``pickup``.

    ``payment_proof`` is the storage name of an uploaded payment slip, if
    any.  It is accepted and logged but not attached to the order.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    items: List[CreateOrderItemDTO]
    shipping_address: str
    payment_method: PaymentMethodEnum
    payment_proof: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("shipping_address")
    @classmethod
    def shipping_address_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Shipping address is required.")
        return v
