"""Booking placement and status transitions."""

from __future__ import annotations

import logging
from typing import Optional

from django.db import DatabaseError, transaction

from notifications import tasks as notification_tasks
from settlements.services import schedule_settlement

from . import errors
from .domain import (
    BookingRequest,
    ValidatedBooking,
    assert_can_transition,
    authorize_transition,
    ensure_inventory_available,
    mark_cancelled,
    validate_booking_request,
)
from .models import Booking, BookingLineItem
from .pricing import BookingTotals, compute_totals

logger = logging.getLogger(__name__)


def create_booking(
    validated: ValidatedBooking,
    totals: BookingTotals,
    *,
    customer_user=None,
) -> Booking:
    """
    Persist a pending, unpaid booking with its line items frozen at creation.

    Both rows are written in one transaction; callers that also schedule the
    settlement should wrap this in their own ``atomic`` block.
    """
    request = validated.request
    customer = request.customer
    guests = request.guests

    with transaction.atomic():
        booking = Booking.objects.create(
            listing_id=validated.bookable.id,
            vendor_id=validated.bookable.vendor_id,
            customer=customer_user if customer_user and customer_user.is_authenticated else None,
            customer_name=customer.full_name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            customer_notes=customer.notes,
            check_in=validated.check_in,
            check_out=validated.check_out,
            nights=validated.nights,
            adults=guests.adults,
            children=guests.children,
            infants=guests.infants,
            currency=request.currency,
            subtotal=totals.subtotal,
            taxes=totals.taxes,
            fees=totals.fees,
            total_amount=totals.total_amount,
            status=Booking.Status.PENDING,
            payment_status=Booking.PaymentStatus.UNPAID,
            metadata={"source": request.source, "notes": request.notes},
        )
        BookingLineItem.objects.bulk_create(
            [
                BookingLineItem(
                    booking=booking,
                    option_id=line.option_id,
                    position=position,
                    name=line.name,
                    quantity=line.quantity,
                    price_per_night=line.price_per_night,
                    taxes=line.taxes,
                    nights=line.nights,
                    total=line.total,
                    addons=list(line.addons),
                )
                for position, line in enumerate(totals.lines)
            ]
        )
    return booking


def _queue_booking_created(booking: Booking) -> None:
    try:
        notification_tasks.send_booking_created_email.delay(booking.id)
    except Exception:
        logger.info(
            "notifications: could not queue send_booking_created_email",
            exc_info=True,
        )


def _queue_status_changed(booking: Booking) -> None:
    try:
        notification_tasks.send_booking_status_email.delay(booking.id, booking.status)
    except Exception:
        logger.info(
            "notifications: could not queue send_booking_status_email",
            exc_info=True,
        )


def place_booking(request: BookingRequest, *, customer_user=None) -> Booking:
    """
    Validate, price and persist a booking together with its settlement.

    Inventory is checked under row locks in the same transaction as the
    booking and settlement writes, so either all rows exist afterwards or
    none do.
    """
    try:
        validated = validate_booking_request(request)
        totals = compute_totals(validated.nights, validated.line_items, request.fees)
    except errors.BookingError as exc:
        logger.info(
            "bookings: rejected booking request for listing %s: %s",
            request.listing_id,
            exc.message,
        )
        raise

    try:
        with transaction.atomic():
            ensure_inventory_available(validated)
            booking = create_booking(validated, totals, customer_user=customer_user)
            schedule_settlement(booking)
    except DatabaseError as exc:
        logger.exception(
            "bookings: failed to persist booking for listing %s",
            request.listing_id,
        )
        raise errors.PersistenceError() from exc

    logger.info(
        "bookings: created booking %s",
        booking.id,
        extra={"booking_id": booking.id, "listing_id": booking.listing_id},
    )
    _queue_booking_created(booking)
    return booking


def transition_booking_status(
    booking_id: int,
    target: str,
    *,
    user,
    reason: Optional[str] = None,
) -> Booking:
    """
    Move a booking to ``target`` after role and state-machine checks.

    The booking row is locked for the duration of the check-and-write.
    """
    if target not in Booking.Status.values:
        raise errors.ValidationError(f"Unknown booking status: {target}.")

    with transaction.atomic():
        booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
        if booking is None:
            raise errors.NotFoundError("Booking not found")

        actor = authorize_transition(user, booking, target)
        assert_can_transition(booking, target)

        previous = booking.status
        update_fields = ["status", "updated_at"]
        if target == Booking.Status.CANCELLED:
            mark_cancelled(booking, actor=actor, reason=(reason or "").strip() or None)
            update_fields += ["cancelled_at", "metadata"]
        else:
            booking.status = target
        booking.save(update_fields=update_fields)

    logger.info(
        "bookings: booking %s moved %s -> %s by %s",
        booking.id,
        previous,
        booking.status,
        actor,
        extra={"booking_id": booking.id, "listing_id": booking.listing_id},
    )
    _queue_status_changed(booking)
    return booking
