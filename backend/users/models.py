from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Marketplace account: a customer, a vendor selling listings, or an admin."""

    class AccountType(models.TextChoices):
        USER = "user", "User"
        VENDOR = "vendor", "Vendor"
        ADMIN = "admin", "Admin"

    account_type = models.CharField(
        max_length=16,
        choices=AccountType.choices,
        default=AccountType.USER,
        db_index=True,
    )
    full_name = models.CharField(max_length=150, blank=True, default="")
    contact_number = models.CharField(max_length=32, blank=True, default="")

    def is_admin(self) -> bool:
        return self.account_type == self.AccountType.ADMIN or bool(self.is_staff)

    def is_vendor(self) -> bool:
        return self.account_type == self.AccountType.VENDOR

    @property
    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username
