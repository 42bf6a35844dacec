from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage
from django.template.loader import render_to_string
from django.utils import timezone

from notifications.models import NotificationLog

logger = logging.getLogger(__name__)

STATUS_WORDS = {
    "pending": "received",
    "confirmed": "confirmed",
    "completed": "completed",
    "cancelled": "cancelled",
}


def _render(template: str, context: dict) -> str:
    """Render a template relative to the notifications app."""
    return render_to_string(template, context).strip()


def _build_email_context(extra: Optional[dict]) -> dict:
    frontend_origin = (getattr(settings, "FRONTEND_ORIGIN", "") or "").rstrip("/")
    context = {
        "site_name": getattr(settings, "SITE_NAME", "TravelMart"),
        "site_url": frontend_origin,
    }
    if extra:
        context.update(extra)
    return context


def _log_notification(
    channel: str,
    type_: str,
    status: str,
    *,
    user_id: int | None = None,
    booking_id: int | None = None,
    recipient: str | None = None,
    error: str | None = None,
) -> None:
    try:
        NotificationLog.objects.create(
            channel=channel,
            type=type_,
            status=status,
            user_id=user_id,
            booking_id=booking_id,
            recipient=recipient or "",
            error=error or "",
        )
    except Exception:
        logger.exception(
            "notifications: failed to persist notification log",
            extra={"channel": channel, "type": type_, "status": status},
        )


def _prepare_email_body(subject: str, template: str | None, context: dict | None) -> str:
    if not template:
        return ""
    context_with_site = _build_email_context(context or {})
    context_with_site["subject"] = subject
    template_path = template if template.startswith("email/") else f"email/{template}"
    return _render(template_path, context_with_site)


def _send_email_logged(
    type_: str,
    *,
    to_email: str | None,
    subject: str,
    template: str | None = None,
    context: dict | None = None,
    user_id: int | None = None,
    booking_id: int | None = None,
) -> bool:
    if not to_email:
        _log_notification(
            "email",
            type_,
            NotificationLog.Status.FAILED,
            user_id=user_id,
            booking_id=booking_id,
            error="missing recipient email",
        )
        logger.warning("notifications: cannot send email without recipient")
        return False

    message = EmailMessage(
        subject=subject,
        body=_prepare_email_body(subject, template, context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to_email],
    )
    try:
        message.send(fail_silently=False)
    except Exception as exc:
        logger.exception(
            "notifications: email send failed",
            extra={"type": type_, "booking_id": booking_id, "user_id": user_id},
        )
        _log_notification(
            "email",
            type_,
            NotificationLog.Status.FAILED,
            user_id=user_id,
            booking_id=booking_id,
            recipient=to_email,
            error=str(exc) or exc.__class__.__name__,
        )
        return False

    _log_notification(
        "email",
        type_,
        NotificationLog.Status.SENT,
        user_id=user_id,
        booking_id=booking_id,
        recipient=to_email,
    )
    return True


def _format_money(amount: Decimal | None, currency: str) -> str:
    if amount is None:
        amount = Decimal("0")
    return f"{currency} {Decimal(amount).quantize(Decimal('0.01'))}"


def _format_stay_date(value) -> str:
    if not value:
        return "N/A"
    return timezone.localtime(value).strftime("%b %d, %Y")


def _load_booking(booking_id: int):
    from bookings.models import Booking

    try:
        return (
            Booking.objects.select_related("listing", "vendor", "customer")
            .prefetch_related("line_items")
            .get(pk=booking_id)
        )
    except Booking.DoesNotExist:
        logger.warning("notifications: booking %s no longer exists", booking_id)
        return None


def _booking_context(booking) -> dict:
    return {
        "booking": booking,
        "listing_name": getattr(booking.listing, "name", "your listing"),
        "customer_name": booking.customer_name,
        "check_in": _format_stay_date(booking.check_in),
        "check_out": _format_stay_date(booking.check_out),
        "nights": booking.nights,
        "line_items": list(booking.line_items.all()),
        "total": _format_money(booking.total_amount, booking.currency),
    }


@shared_task(queue="emails")
def send_booking_created_email(booking_id: int):
    """Tell the vendor about a new booking and send the customer a confirmation."""
    booking = _load_booking(booking_id)
    if booking is None:
        return

    context = _booking_context(booking)
    listing_name = context["listing_name"]
    vendor = booking.vendor
    _send_email_logged(
        "booking_created_vendor",
        to_email=getattr(vendor, "email", None),
        subject=f"New booking for {listing_name}",
        template="booking_created_vendor.txt",
        context={**context, "vendor_name": vendor.display_name},
        user_id=vendor.pk,
        booking_id=booking.id,
    )
    _send_email_logged(
        "booking_created_customer",
        to_email=booking.customer_email,
        subject=f"Your booking request for {listing_name}",
        template="booking_created_customer.txt",
        context=context,
        user_id=booking.customer_id,
        booking_id=booking.id,
    )


@shared_task(queue="emails")
def send_booking_status_email(booking_id: int, new_status: str):
    """Notify the customer that their booking status changed."""
    booking = _load_booking(booking_id)
    if booking is None:
        return

    context = _booking_context(booking)
    status_word = STATUS_WORDS.get(new_status, "updated")
    reason = (booking.metadata or {}).get("cancellationReason", "")
    _send_email_logged(
        "booking_status_update",
        to_email=booking.customer_email,
        subject=f"Your booking for {context['listing_name']} was {status_word}",
        template="booking_status_update.txt",
        context={
            **context,
            "status_word": status_word,
            "status_label": status_word.capitalize(),
            "reason": reason,
        },
        user_id=booking.customer_id,
        booking_id=booking.id,
    )
