"""Dashboard statistics for a vendor's bookings."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional

from django.db.models import Sum
from django.utils import timezone

from .models import Booking

RECENT_BOOKINGS_LIMIT = 5
CENT = Decimal("0.01")
EARNING_STATUSES = (Booking.Status.CONFIRMED, Booking.Status.COMPLETED)


def _day_bounds(day) -> tuple[datetime, datetime]:
    start = timezone.make_aware(datetime.combine(day, time.min))
    return start, start + timedelta(days=1)


def _sum_total(queryset) -> str:
    total = queryset.aggregate(total=Sum("total_amount"))["total"] or Decimal("0")
    return str(Decimal(total).quantize(CENT))


def vendor_booking_stats(vendor, *, now: Optional[datetime] = None) -> dict[str, Any]:
    """
    Counts, earnings and the most recent bookings for one vendor.

    Earnings only include confirmed/completed bookings that were not refunded;
    the daily earning windows follow the booking's last update.
    """
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    today_start, today_end = _day_bounds(today)
    yesterday_start, yesterday_end = _day_bounds(today - timedelta(days=1))

    bookings = Booking.objects.filter(vendor=vendor)
    active = bookings.exclude(status=Booking.Status.CANCELLED)
    earning = bookings.filter(status__in=EARNING_STATUSES).exclude(
        payment_status=Booking.PaymentStatus.REFUNDED
    )

    recent = bookings.select_related("listing").order_by("-created_at", "-id")[
        :RECENT_BOOKINGS_LIMIT
    ]
    return {
        "stats": {
            "todayBookings": active.filter(
                created_at__gte=today_start, created_at__lt=today_end
            ).count(),
            "totalBookings": active.count(),
            "todayEarnings": _sum_total(
                earning.filter(updated_at__gte=today_start, updated_at__lt=today_end)
            ),
            "yesterdayEarnings": _sum_total(
                earning.filter(updated_at__gte=yesterday_start, updated_at__lt=yesterday_end)
            ),
            "totalEarnings": _sum_total(earning),
        },
        "recentBookings": [
            {
                "id": booking.id,
                "status": booking.status,
                "price": str(booking.total_amount),
                "serviceName": booking.listing.name,
            }
            for booking in recent
        ],
    }
