"""Caller identity for the order endpoints.

Token verification itself is delegated to ``rest_framework_simplejwt``
(see ``REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"]``).  This module
turns the verified Django user into an :class:`Actor`, the only shape the
order services know about, and exposes the DRF permission classes that
split customer endpoints from admin endpoints.

Security decisions
------------------
* **Trust the verified user**: the services never re-check credentials.
* ``is_admin`` maps to ``User.is_staff``; admin endpoints use DRF's
  ``IsAdminUser`` so the two stay in lock-step.
* A customer is a user with a linked ``Customer`` profile.  A staff user
  without one cannot call customer endpoints (403).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ObjectDoesNotExist
from rest_framework.permissions import BasePermission

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an order operation."""

    username: str
    is_admin: bool = False
    customer_id: Optional[UUID] = None

    @property
    def is_customer(self) -> bool:
        return self.customer_id is not None

    @property
    def admin_tag(self) -> str:
        return f"admin:{self.username}"

    @property
    def customer_tag(self) -> str:
        return f"customer:{self.username}"

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        """Build an actor from a Django (or token) user."""
        try:
            customer = user.customer
        except (AttributeError, ObjectDoesNotExist):
            customer = None
        return cls(
            username=user.get_username(),
            is_admin=bool(getattr(user, "is_staff", False)),
            customer_id=customer.id if customer is not None else None,
        )


class IsCustomer(BasePermission):
    """Allow only authenticated users with a linked customer profile."""

    message = "A customer account is required."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not (user and user.is_authenticated):
            return False
        actor = Actor.from_user(user)
        if not actor.is_customer:
            logger.warning("auth.customer_profile_missing", username=actor.username)
            return False
        return True
