"""Settlement scheduling for newly created bookings."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings

from bookings.models import Booking

from .models import Settlement

logger = logging.getLogger(__name__)
AUTO_GENERATED_NOTE = "Auto-generated from booking"


def settlement_due_date(check_out: datetime) -> datetime:
    """Return check-out plus the configured settlement offset."""
    return check_out + timedelta(days=settings.SETTLEMENT_DUE_OFFSET_DAYS)


def schedule_settlement(booking: Booking) -> Settlement:
    """
    Create the settlement owed to the vendor for a just-written booking.

    Call inside the same transaction as the booking write so the two rows
    commit or roll back together.
    """
    if booking.pk is None:
        raise ValueError("Cannot schedule a settlement for an unsaved booking.")

    settlement = Settlement.objects.create(
        booking=booking,
        listing_id=booking.listing_id,
        vendor_id=booking.vendor_id,
        amount_due=booking.total_amount,
        amount_paid=Decimal("0.00"),
        currency=booking.currency,
        scheduled_date=settlement_due_date(booking.check_out),
        status=Settlement.Status.PENDING,
        notes=AUTO_GENERATED_NOTE,
    )
    logger.info(
        "settlements: scheduled settlement %s for booking %s on %s",
        settlement.id,
        booking.id,
        settlement.scheduled_date.isoformat(),
    )
    return settlement
