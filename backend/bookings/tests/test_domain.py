"""Tests for booking validation, availability and transition rules."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest
from django.contrib.auth.models import AnonymousUser

from bookings import errors
from bookings.domain import (
    MAX_LINE_QUANTITY,
    BookingRequest,
    CustomerInfo,
    GuestCounts,
    LineItemRequest,
    assert_can_transition,
    authorize_transition,
    calculate_nights,
    can_view_booking,
    coerce_quantity,
    ensure_inventory_available,
    mark_cancelled,
    parse_instant,
    validate_booking_request,
    validate_stay_window,
)
from bookings.models import Booking
from listings.bookable import LineItemRef

pytestmark = pytest.mark.django_db

UTC = dt_timezone.utc


def make_request(listing, *items, **overrides) -> BookingRequest:
    fields = {
        "listing_id": listing.id,
        "check_in": "2031-03-10",
        "check_out": "2031-03-13",
        "line_items": items,
        "customer": CustomerInfo(full_name="Asha Rao", email="asha@example.com"),
        "guests": GuestCounts(adults=2),
    }
    fields.update(overrides)
    return BookingRequest(**fields)


def room(option=None, *, name: str = "", quantity=1) -> LineItemRequest:
    return LineItemRequest(
        ref=LineItemRef(option_id=getattr(option, "id", None), name=name),
        quantity=quantity,
    )


def test_nights_for_exact_day():
    check_in = datetime(2024, 1, 1, tzinfo=UTC)
    check_out = datetime(2024, 1, 2, tzinfo=UTC)
    assert calculate_nights(check_in, check_out) == 1


def test_nights_round_partial_day_up():
    check_in = datetime(2024, 1, 1, 22, tzinfo=UTC)
    check_out = datetime(2024, 1, 2, 2, tzinfo=UTC)
    assert calculate_nights(check_in, check_out) == 1

    check_out = datetime(2024, 1, 3, 1, tzinfo=UTC)
    assert calculate_nights(check_in, check_out) == 2


def test_parse_instant_accepts_dates_and_datetimes():
    assert parse_instant("2031-03-10") == datetime(2031, 3, 10, tzinfo=UTC)
    assert parse_instant("2031-03-10T12:30:00Z") == datetime(2031, 3, 10, 12, 30, tzinfo=UTC)
    assert parse_instant("next tuesday") is None
    assert parse_instant("") is None
    assert parse_instant(None) is None


@pytest.mark.parametrize(
    "check_in,check_out",
    [
        ("2031-03-10", "2031-03-10"),
        ("2031-03-12", "2031-03-10"),
        ("not-a-date", "2031-03-10"),
        ("2031-03-10", None),
    ],
)
def test_stay_window_rejects_bad_ranges(check_in, check_out):
    with pytest.raises(errors.InvalidDateRangeError):
        validate_stay_window(check_in, check_out)


@pytest.mark.parametrize("value", [0, -1, 1.5, "2.5", "abc", float("inf"), True])
def test_coerce_quantity_rejects_non_positive_integers(value):
    with pytest.raises(errors.InvalidQuantityError):
        coerce_quantity(value)


@pytest.mark.parametrize("value", ["1e1000000", 10**20, "2147483648", Decimal("1E+50")])
def test_coerce_quantity_rejects_oversized_values(value):
    with pytest.raises(errors.InvalidQuantityError):
        coerce_quantity(value)


def test_coerce_quantity_accepts_column_maximum():
    assert coerce_quantity(MAX_LINE_QUANTITY) == MAX_LINE_QUANTITY


def test_coerce_quantity_accepts_integral_values():
    assert coerce_quantity(3) == 3
    assert coerce_quantity("2") == 2
    assert coerce_quantity(Decimal("4.0")) == 4
    assert coerce_quantity(None) == 1


def test_validate_resolves_room_by_id_then_name(listing, deluxe_room, suite_room):
    validated = validate_booking_request(
        make_request(listing, room(deluxe_room, quantity=2), room(name="Family Suite"))
    )

    assert validated.nights == 3
    assert [item.snapshot.option_id for item in validated.line_items] == [
        deluxe_room.id,
        suite_room.id,
    ]
    assert validated.line_items[0].quantity == 2
    assert validated.bookable.vendor_id == listing.vendor_id


def test_validate_prefers_id_over_conflicting_name(listing, deluxe_room, suite_room):
    validated = validate_booking_request(
        make_request(listing, room(deluxe_room, name="Family Suite"))
    )
    assert validated.line_items[0].snapshot.option_id == deluxe_room.id


def test_validate_unknown_room_names_the_item(listing, deluxe_room):
    with pytest.raises(errors.LineItemNotFoundError) as exc:
        validate_booking_request(make_request(listing, room(name="Penthouse")))
    assert exc.value.message == "Room Penthouse not found"
    assert exc.value.status_code == 404


def test_validate_uses_kind_specific_label(listing, deluxe_room):
    listing.kind = listing.Kind.VEHICLE_RENTAL
    listing.save(update_fields=["kind"])

    with pytest.raises(errors.LineItemNotFoundError) as exc:
        validate_booking_request(make_request(listing, room(name="Jeep")))
    assert exc.value.message == "Vehicle Jeep not found"


def test_validate_rejects_inactive_listing(listing, deluxe_room):
    listing.is_active = False
    listing.save(update_fields=["is_active"])

    with pytest.raises(errors.NotFoundError):
        validate_booking_request(make_request(listing, room(deluxe_room)))


def test_validate_rejects_missing_listing(listing, deluxe_room):
    request = make_request(listing, room(deluxe_room), listing_id=listing.id + 999)
    with pytest.raises(errors.NotFoundError):
        validate_booking_request(request)


def test_validate_rejects_empty_rooms(listing):
    with pytest.raises(errors.EmptyLineItemsError):
        validate_booking_request(make_request(listing))


@pytest.mark.parametrize(
    "customer",
    [
        None,
        CustomerInfo(full_name="", email="asha@example.com"),
        CustomerInfo(full_name="Asha Rao", email="   "),
    ],
)
def test_validate_requires_customer_name_and_email(listing, deluxe_room, customer):
    with pytest.raises(errors.MissingCustomerInfoError):
        validate_booking_request(make_request(listing, room(deluxe_room), customer=customer))


def test_validate_requires_an_adult(listing, deluxe_room):
    with pytest.raises(errors.ValidationError):
        validate_booking_request(
            make_request(listing, room(deluxe_room), guests=GuestCounts(adults=0))
        )


@pytest.mark.parametrize(
    "guests",
    [
        GuestCounts(adults=10**20),
        GuestCounts(adults=2, children=32768),
        GuestCounts(adults=2, infants=10**6),
    ],
)
def test_validate_rejects_oversized_guest_counts(listing, deluxe_room, guests):
    with pytest.raises(errors.ValidationError) as exc:
        validate_booking_request(make_request(listing, room(deluxe_room), guests=guests))
    assert exc.value.status_code == 400


def test_validate_checks_quantity_after_resolving_room(listing, deluxe_room):
    with pytest.raises(errors.InvalidQuantityError):
        validate_booking_request(make_request(listing, room(deluxe_room, quantity=0)))

    with pytest.raises(errors.LineItemNotFoundError):
        validate_booking_request(make_request(listing, room(name="Penthouse", quantity=0)))


def test_validate_checks_dates_first(listing):
    request = make_request(listing, check_out="2031-03-01", customer=None)
    with pytest.raises(errors.InvalidDateRangeError):
        validate_booking_request(request)


def test_inventory_allows_up_to_capacity(listing, deluxe_room, booking_factory):
    booking_factory(quantity=1)
    validated = validate_booking_request(make_request(listing, room(deluxe_room, quantity=2)))

    ensure_inventory_available(validated)


def test_inventory_rejects_overbooking(listing, deluxe_room, booking_factory):
    booking_factory(quantity=2, status=Booking.Status.CONFIRMED)
    validated = validate_booking_request(make_request(listing, room(deluxe_room, quantity=2)))

    with pytest.raises(errors.AvailabilityError) as exc:
        ensure_inventory_available(validated)
    assert exc.value.status_code == 409


def test_inventory_sums_repeated_lines(listing, deluxe_room):
    validated = validate_booking_request(
        make_request(listing, room(deluxe_room, quantity=2), room(name="Deluxe Room", quantity=2))
    )
    with pytest.raises(errors.AvailabilityError):
        ensure_inventory_available(validated)


def test_inventory_ignores_cancelled_and_non_overlapping(listing, deluxe_room, booking_factory):
    booking_factory(quantity=3, status=Booking.Status.CANCELLED)
    booking_factory(
        quantity=3,
        check_in=datetime(2031, 3, 13, tzinfo=UTC),
        status=Booking.Status.CONFIRMED,
    )
    booking_factory(
        quantity=3,
        check_in=datetime(2031, 3, 8, tzinfo=UTC),
        nights=2,
        status=Booking.Status.PENDING,
    )
    validated = validate_booking_request(make_request(listing, room(deluxe_room, quantity=3)))

    ensure_inventory_available(validated)


@pytest.mark.parametrize(
    "current,allowed",
    [
        (Booking.Status.PENDING, {Booking.Status.CONFIRMED, Booking.Status.CANCELLED}),
        (Booking.Status.CONFIRMED, {Booking.Status.COMPLETED, Booking.Status.CANCELLED}),
        (Booking.Status.COMPLETED, set()),
        (Booking.Status.CANCELLED, set()),
    ],
)
def test_state_machine_closure(current, allowed):
    booking = Booking(status=current)
    for target in Booking.Status.values:
        if target in allowed:
            assert_can_transition(booking, target)
        else:
            with pytest.raises(errors.InvalidTransitionError):
                assert_can_transition(booking, target)


def test_authorize_vendor_and_admin_for_any_target(
    booking_factory, vendor_user, admin_user
):
    booking = booking_factory()
    assert authorize_transition(vendor_user, booking, Booking.Status.CONFIRMED) == "vendor"
    assert authorize_transition(admin_user, booking, Booking.Status.COMPLETED) == "admin"


def test_customer_may_only_cancel(booking_factory, customer_user):
    booking = booking_factory()
    assert authorize_transition(customer_user, booking, Booking.Status.CANCELLED) == "customer"
    with pytest.raises(errors.UnauthorizedTransitionError):
        authorize_transition(customer_user, booking, Booking.Status.CONFIRMED)


def test_customer_matched_by_email_for_guest_booking(booking_factory, customer_user):
    booking = booking_factory(guest=True, customer_email="CUSTOMER@example.com")
    assert authorize_transition(customer_user, booking, Booking.Status.CANCELLED) == "customer"
    assert can_view_booking(customer_user, booking)


def test_strangers_cannot_transition(booking_factory, other_vendor, other_customer):
    booking = booking_factory()
    for user in (other_vendor, other_customer, AnonymousUser()):
        with pytest.raises(errors.UnauthorizedTransitionError):
            authorize_transition(user, booking, Booking.Status.CANCELLED)
        assert not can_view_booking(user, booking)


def test_mark_cancelled_records_actor_and_reason(booking_factory):
    booking = booking_factory()
    mark_cancelled(booking, actor="customer", reason="Plans changed")

    assert booking.status == Booking.Status.CANCELLED
    assert booking.cancelled_at is not None
    assert booking.metadata["cancelledBy"] == "customer"
    assert booking.metadata["cancellationReason"] == "Plans changed"
