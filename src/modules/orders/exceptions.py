"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The order does not exist or is not visible to the caller.

    Customer-scoped lookups raise this for orders owned by someone else,
    so callers cannot probe for other customers' order ids.
    """


class NoOrdersFound(Exception):
    """The customer has not placed any order yet."""


class ActionNotAllowed(Exception):
    """The actor's role does not permit the requested operation."""


class OrderConflict(Exception):
    """The order is already in the state the transition would produce."""


class OrderAlreadyPaid(OrderConflict):
    """``payment_status`` is already ``paid``."""


class OrderAlreadyCompleted(OrderConflict):
    """The order has already been marked completed."""


class OrderAlreadyConfirmed(OrderConflict):
    """Repeat confirmation while strict admin transitions are enabled."""


class OrderAlreadyCancelled(OrderConflict):
    """Repeat cancellation while strict admin transitions are enabled."""


class OrderTotalTooLarge(Exception):
    """The priced cart does not fit the order's price columns."""
