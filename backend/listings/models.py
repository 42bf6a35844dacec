from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Listing(models.Model):
    """A bookable entity owned by a vendor: a stay, tour, adventure or vehicle rental."""

    class Kind(models.TextChoices):
        STAY = "stay", "Stay"
        TOUR = "tour", "Tour"
        ADVENTURE = "adventure", "Adventure"
        VEHICLE_RENTAL = "vehicle_rental", "Vehicle rental"

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
    )
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.STAY)
    name = models.CharField(max_length=140)
    category = models.CharField(max_length=60, blank=True, default="")
    city = models.CharField(max_length=60, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["vendor", "kind"], name="listing_vendor_kind_idx"),
            models.Index(fields=["kind", "is_active"], name="listing_kind_active_idx"),
        ]

    def clean(self):
        if not self.name or len(self.name.strip()) < 3:
            raise ValidationError("Name too short")

    def __str__(self) -> str:
        return f"{self.name} ({self.kind})"


class ListingOption(models.Model):
    """
    A bookable unit of a listing: a stay's room type, a tour or adventure
    option, or a rental vehicle. Price and taxes are per night (or per day)
    and per unit.
    """

    listing = models.ForeignKey(
        Listing,
        on_delete=models.CASCADE,
        related_name="options",
    )
    name = models.CharField(max_length=140)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        default=0,
    )
    taxes = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        default=0,
    )
    capacity = models.PositiveIntegerField(default=1, help_text="Guests per unit.")
    inventory = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Units that can be booked for the same dates.",
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(fields=["listing", "name"], name="listing_option_unique_name"),
        ]

    def __str__(self) -> str:
        return f"{self.name} for listing {self.listing_id}"
