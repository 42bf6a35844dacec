"""Shared fixtures for bookings tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import Callable

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from bookings.models import Booking, BookingLineItem
from listings.models import Listing, ListingOption

User = get_user_model()
CHECK_IN = datetime(2031, 3, 10, tzinfo=dt_timezone.utc)


def _create_user(*, username: str, account_type: str, **extra) -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="testpass",
        account_type=account_type,
        **extra,
    )


def auth(user) -> APIClient:
    client = APIClient()
    token_resp = client.post(
        "/api/users/token/",
        {"username": user.username, "password": "testpass"},
        format="json",
    )
    token = token_resp.data["access"]
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def vendor_user():
    return _create_user(username="vendor", account_type=User.AccountType.VENDOR, full_name="Hill Stays")


@pytest.fixture
def other_vendor():
    return _create_user(username="other-vendor", account_type=User.AccountType.VENDOR)


@pytest.fixture
def customer_user():
    return _create_user(username="customer", account_type=User.AccountType.USER, full_name="Asha Rao")


@pytest.fixture
def other_customer():
    return _create_user(username="other-customer", account_type=User.AccountType.USER)


@pytest.fixture
def admin_user():
    return _create_user(username="admin", account_type=User.AccountType.ADMIN)


@pytest.fixture
def listing(vendor_user):
    return Listing.objects.create(
        vendor=vendor_user,
        kind=Listing.Kind.STAY,
        name="Cedar Ridge Cottages",
        category="cottage",
        city="Manali",
        is_active=True,
    )


@pytest.fixture
def deluxe_room(listing):
    return ListingOption.objects.create(
        listing=listing,
        name="Deluxe Room",
        price=Decimal("2000.00"),
        taxes=Decimal("200.00"),
        capacity=2,
        inventory=3,
        position=0,
    )


@pytest.fixture
def suite_room(listing):
    return ListingOption.objects.create(
        listing=listing,
        name="Family Suite",
        price=Decimal("3500.00"),
        taxes=Decimal("420.00"),
        capacity=4,
        inventory=1,
        position=1,
    )


@pytest.fixture
def booking_payload(listing, deluxe_room) -> Callable[..., dict]:
    def _payload(**overrides) -> dict:
        payload = {
            "stayId": listing.id,
            "checkIn": "2031-03-10",
            "checkOut": "2031-03-13",
            "rooms": [{"roomId": deluxe_room.id, "roomName": deluxe_room.name, "quantity": 2}],
            "guests": {"adults": 2, "children": 1},
            "customer": {
                "fullName": "Asha Rao",
                "email": "customer@example.com",
                "phone": "+91 98000 00000",
            },
            "notes": "Late arrival",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def booking_factory(listing, deluxe_room, customer_user) -> Callable[..., Booking]:
    def _create_booking(
        *,
        listing_override: Listing | None = None,
        option: ListingOption | None = None,
        customer=None,
        guest: bool = False,
        customer_email: str | None = None,
        check_in: datetime = CHECK_IN,
        nights: int = 2,
        quantity: int = 1,
        status=Booking.Status.PENDING,
        **extra_fields,
    ) -> Booking:
        selected_listing = listing_override or listing
        selected_option = option or deluxe_room
        if guest:
            customer = None
        elif customer is None:
            customer = customer_user
        line_total = (selected_option.price + selected_option.taxes) * quantity * nights
        booking = Booking.objects.create(
            listing=selected_listing,
            vendor=selected_listing.vendor,
            customer=customer,
            customer_name="Asha Rao",
            customer_email=customer_email or (customer.email if customer else "guest@example.com"),
            check_in=check_in,
            check_out=check_in + timedelta(days=nights),
            nights=nights,
            currency="INR",
            subtotal=selected_option.price * quantity * nights,
            taxes=selected_option.taxes * quantity * nights,
            total_amount=line_total,
            status=status,
            **extra_fields,
        )
        BookingLineItem.objects.create(
            booking=booking,
            option=selected_option,
            name=selected_option.name,
            quantity=quantity,
            price_per_night=selected_option.price,
            taxes=selected_option.taxes,
            nights=nights,
            total=line_total,
        )
        return booking

    return _create_booking
