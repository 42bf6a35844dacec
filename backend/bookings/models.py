"""Database models for marketplace bookings."""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from listings.models import Listing, ListingOption


class Booking(models.Model):
    """One reservation against one listing. Never deleted; kept as history."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        CONFIRMED = "confirmed", "confirmed"
        COMPLETED = "completed", "completed"
        CANCELLED = "cancelled", "cancelled"

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", "unpaid"
        PENDING = "pending", "pending"
        PAID = "paid", "paid"
        REFUNDED = "refunded", "refunded"

    listing = models.ForeignKey(
        Listing,
        related_name="bookings",
        on_delete=models.PROTECT,
    )
    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="bookings_as_vendor",
        on_delete=models.PROTECT,
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="bookings_as_customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Null for guest bookings.",
    )
    customer_name = models.CharField(max_length=150)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=32, blank=True, default="")
    customer_notes = models.TextField(blank=True, default="")
    check_in = models.DateTimeField()
    check_out = models.DateTimeField(help_text="Must be after check_in.")
    nights = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    adults = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    children = models.PositiveSmallIntegerField(default=0)
    infants = models.PositiveSmallIntegerField(default=0)
    currency = models.CharField(max_length=8)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)
    taxes = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    fees = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    metadata = models.JSONField(default=dict, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["listing", "check_in"], name="booking_listing_checkin_idx"),
            models.Index(fields=["vendor", "status"], name="booking_vendor_status_idx"),
            models.Index(fields=["customer_email"], name="booking_customer_email_idx"),
        ]

    def __str__(self) -> str:
        """Return a human-readable representation."""
        return f"Booking #{self.pk} for {self.listing_id} ({self.status})"


class BookingLineItem(models.Model):
    """A room/option selection frozen at booking time."""

    booking = models.ForeignKey(
        Booking,
        related_name="line_items",
        on_delete=models.CASCADE,
    )
    option = models.ForeignKey(
        ListingOption,
        related_name="booking_line_items",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    position = models.PositiveSmallIntegerField(default=0)
    name = models.CharField(max_length=140)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_per_night = models.DecimalField(max_digits=12, decimal_places=2)
    taxes = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    nights = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total = models.DecimalField(max_digits=14, decimal_places=2)
    addons = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["booking_id", "position"]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.name} on booking {self.booking_id}"
