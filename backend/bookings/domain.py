"""Domain helpers for booking validation and state transitions."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Literal, Optional

from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from listings.bookable import LineItemRef, ListingBookable, PricedLineItem, load_bookable
from listings.models import ListingOption

from . import errors
from .models import Booking, BookingLineItem

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

# Column limits of BookingLineItem.quantity and the Booking guest counts.
MAX_LINE_QUANTITY = 2**31 - 1
MAX_GUEST_COUNT = 32767

# Statuses that hold inventory for availability checks.
ACTIVE_BOOKING_STATUSES = (
    Booking.Status.PENDING,
    Booking.Status.CONFIRMED,
)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    Booking.Status.PENDING: frozenset({Booking.Status.CONFIRMED, Booking.Status.CANCELLED}),
    Booking.Status.CONFIRMED: frozenset({Booking.Status.COMPLETED, Booking.Status.CANCELLED}),
    Booking.Status.COMPLETED: frozenset(),
    Booking.Status.CANCELLED: frozenset(),
}

TransitionActor = Literal["admin", "vendor", "customer"]


@dataclass(frozen=True)
class CustomerInfo:
    full_name: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""


@dataclass(frozen=True)
class GuestCounts:
    adults: int = 1
    children: int = 0
    infants: int = 0


@dataclass(frozen=True)
class LineItemRequest:
    """One requested room/option, as sent by the client."""

    ref: LineItemRef
    quantity: object = 1
    price_per_night: Optional[Decimal] = None
    taxes: Optional[Decimal] = None
    addons: tuple[str, ...] = ()


@dataclass(frozen=True)
class BookingRequest:
    """Parsed booking payload handed to the core by the API layer."""

    listing_id: int
    check_in: object
    check_out: object
    line_items: tuple[LineItemRequest, ...]
    customer: Optional[CustomerInfo]
    guests: GuestCounts = field(default_factory=GuestCounts)
    currency: str = "INR"
    fees: Decimal = Decimal("0")
    notes: str = ""
    source: str = "web"


@dataclass(frozen=True)
class ResolvedLineItem:
    """A requested line item matched against the listing's stored option."""

    snapshot: PricedLineItem
    quantity: int
    price_override: Optional[Decimal] = None
    taxes_override: Optional[Decimal] = None
    addons: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidatedBooking:
    bookable: ListingBookable
    request: BookingRequest
    check_in: datetime
    check_out: datetime
    nights: int
    line_items: tuple[ResolvedLineItem, ...]


def parse_instant(value: object) -> Optional[datetime]:
    """
    Coerce a datetime, date or ISO-8601 string into an aware datetime.

    Date-only values are treated as midnight UTC. Returns None when the value
    cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None
        if parsed is None:
            return None
    else:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def validate_stay_window(check_in: object, check_out: object) -> tuple[datetime, datetime]:
    """Parse both dates and require check-out strictly after check-in."""
    start = parse_instant(check_in)
    end = parse_instant(check_out)
    if start is None or end is None:
        raise errors.InvalidDateRangeError("Check-in and check-out must be valid dates.")
    if end <= start:
        raise errors.InvalidDateRangeError("Check-out must be after check-in.")
    return start, end


def calculate_nights(check_in: datetime, check_out: datetime) -> int:
    """Whole days between the two instants, rounded up and never below 1."""
    elapsed = check_out - check_in
    return max(1, -(-elapsed // ONE_DAY))


def coerce_quantity(value: object) -> int:
    """Return value as a positive int, or raise InvalidQuantityError."""
    if value is None:
        return 1
    if isinstance(value, bool):
        raise errors.InvalidQuantityError()
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise errors.InvalidQuantityError() from None
    # Bound before any integral conversion: "1e1000000" is finite and integral.
    if not amount.is_finite() or amount <= 0 or amount > MAX_LINE_QUANTITY:
        raise errors.InvalidQuantityError()
    if amount != amount.to_integral_value():
        raise errors.InvalidQuantityError()
    return int(amount)


def validate_customer(customer: Optional[CustomerInfo]) -> CustomerInfo:
    if customer is None:
        raise errors.MissingCustomerInfoError()
    full_name = (customer.full_name or "").strip()
    email = (customer.email or "").strip()
    if not full_name or not email:
        raise errors.MissingCustomerInfoError()
    return CustomerInfo(
        full_name=full_name,
        email=email,
        phone=(customer.phone or "").strip(),
        notes=(customer.notes or "").strip(),
    )


def validate_guests(guests: GuestCounts) -> None:
    if guests.adults < 1:
        raise errors.ValidationError("At least one adult guest is required.")
    if guests.children < 0 or guests.infants < 0:
        raise errors.ValidationError("Guest counts cannot be negative.")
    if max(guests.adults, guests.children, guests.infants) > MAX_GUEST_COUNT:
        raise errors.ValidationError("Guest counts are too large.")


def validate_booking_request(request: BookingRequest) -> ValidatedBooking:
    """
    Validate a booking request against the listing store.

    Pure apart from reading the listing; raises a ``BookingError`` subclass on
    the first problem found.
    """
    check_in, check_out = validate_stay_window(request.check_in, request.check_out)

    if not request.line_items:
        raise errors.EmptyLineItemsError()

    customer = validate_customer(request.customer)
    validate_guests(request.guests)

    bookable = load_bookable(request.listing_id)
    if bookable is None:
        raise errors.NotFoundError("Listing not found")

    resolved: list[ResolvedLineItem] = []
    for item in request.line_items:
        snapshot = bookable.resolve_line_item(item.ref)
        if snapshot is None:
            raise errors.LineItemNotFoundError(item.ref.describe(), bookable.line_item_label)
        resolved.append(
            ResolvedLineItem(
                snapshot=snapshot,
                quantity=coerce_quantity(item.quantity),
                price_override=item.price_per_night,
                taxes_override=item.taxes,
                addons=tuple(item.addons),
            )
        )

    if customer != request.customer:
        request = replace(request, customer=customer)

    return ValidatedBooking(
        bookable=bookable,
        request=request,
        check_in=check_in,
        check_out=check_out,
        nights=calculate_nights(check_in, check_out),
        line_items=tuple(resolved),
    )


def ensure_inventory_available(validated: ValidatedBooking) -> None:
    """
    Reject the request when it would overbook any option for its dates.

    Must run inside a transaction: the requested option rows are locked so
    concurrent requests for the same option serialize here.
    """
    requested: dict[int, int] = defaultdict(int)
    for item in validated.line_items:
        requested[item.snapshot.option_id] += item.quantity

    options = {
        option.pk: option
        for option in ListingOption.objects.select_for_update()
        .filter(pk__in=requested.keys())
        .order_by("pk")
    }
    label = validated.bookable.line_item_label

    for option_id, quantity in requested.items():
        option = options.get(option_id)
        if option is None:
            raise errors.LineItemNotFoundError(str(option_id), label)
        held = (
            BookingLineItem.objects.filter(
                option_id=option_id,
                booking__status__in=ACTIVE_BOOKING_STATUSES,
                booking__check_in__lt=validated.check_out,
                booking__check_out__gt=validated.check_in,
            ).aggregate(total=Sum("quantity"))["total"]
            or 0
        )
        if held + quantity > option.inventory:
            remaining = max(option.inventory - held, 0)
            logger.info(
                "bookings: overbooking rejected for option %s (held=%s requested=%s inventory=%s)",
                option_id,
                held,
                quantity,
                option.inventory,
            )
            raise errors.AvailabilityError(
                f"Only {remaining} {label}(s) of {option.name} left for these dates."
            )


def is_booking_vendor(user, booking: Booking) -> bool:
    return bool(user and user.is_authenticated and user.pk == booking.vendor_id)


def is_booking_customer(user, booking: Booking) -> bool:
    """Match by customer id, falling back to the contact email for guest bookings."""
    if not user or not user.is_authenticated:
        return False
    if booking.customer_id and booking.customer_id == user.pk:
        return True
    email = (getattr(user, "email", "") or "").strip()
    return bool(email) and email.lower() == (booking.customer_email or "").lower()


def can_view_booking(user, booking: Booking) -> bool:
    if not user or not user.is_authenticated:
        return False
    return user.is_admin() or is_booking_vendor(user, booking) or is_booking_customer(user, booking)


def authorize_transition(user, booking: Booking, target: str) -> TransitionActor:
    """
    Return which role the caller acts in, or raise UnauthorizedTransitionError.

    Vendors and admins may apply any transition; customers may only cancel.
    """
    if user is None or not user.is_authenticated:
        raise errors.UnauthorizedTransitionError("Authentication required.")
    if user.is_admin():
        return "admin"
    if is_booking_vendor(user, booking):
        return "vendor"
    if is_booking_customer(user, booking):
        if target == Booking.Status.CANCELLED:
            return "customer"
        raise errors.UnauthorizedTransitionError(
            f"Only the vendor or an admin can mark this booking {target}."
        )
    raise errors.UnauthorizedTransitionError()


def assert_can_transition(booking: Booking, target: str) -> None:
    if target not in ALLOWED_TRANSITIONS.get(booking.status, frozenset()):
        raise errors.InvalidTransitionError(
            f"Cannot change a {booking.status} booking to {target}."
        )


def mark_cancelled(
    booking: Booking,
    *,
    actor: TransitionActor,
    reason: str | None = None,
) -> None:
    """
    Mutate the provided booking instance into a cancelled state.
    """
    booking.status = Booking.Status.CANCELLED
    booking.cancelled_at = timezone.now()
    metadata = dict(booking.metadata or {})
    metadata["cancelledBy"] = actor
    if reason:
        metadata["cancellationReason"] = reason
    booking.metadata = metadata
