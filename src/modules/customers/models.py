"""Customer profile linked to a Django auth user.

Authentication is owned by ``django.contrib.auth``; this model only adds
what the order service needs about a buyer: a stable ``id`` used as the
order owner, and the contact email shown to administrators.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Customer(BaseModel):
    """Storefront customer.

    ``user`` supplies the username used in payment tags
    (``customer:<username>``).  ``email`` is independent of ``User.email``
    so a customer can keep a contact address without touching the login.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="customer",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
        ]

    @property
    def username(self) -> str:
        return self.user.get_username()

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
