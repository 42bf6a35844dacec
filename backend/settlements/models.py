"""Vendor settlements generated from bookings."""

from __future__ import annotations

from django.conf import settings
from django.db import models

from bookings.models import Booking
from listings.models import Listing


class Settlement(models.Model):
    """Money owed by the platform to a vendor for exactly one booking."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        PAID = "paid", "paid"
        CANCELLED = "cancelled", "cancelled"

    booking = models.OneToOneField(
        Booking,
        related_name="settlement",
        on_delete=models.CASCADE,
    )
    listing = models.ForeignKey(
        Listing,
        related_name="settlements",
        on_delete=models.PROTECT,
    )
    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="settlements",
        on_delete=models.PROTECT,
    )
    amount_due = models.DecimalField(max_digits=14, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    currency = models.CharField(max_length=8)
    scheduled_date = models.DateTimeField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["scheduled_date", "id"]
        indexes = [
            models.Index(fields=["vendor", "status"], name="settlement_vendor_status_idx"),
            models.Index(fields=["scheduled_date"], name="settlement_scheduled_idx"),
        ]

    def __str__(self) -> str:
        return f"Settlement #{self.pk} for booking {self.booking_id} ({self.status})"

    @property
    def amount_outstanding(self):
        return self.amount_due - self.amount_paid
