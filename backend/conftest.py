"""Shared pytest configuration and fixtures."""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

# Share the bookings fixtures suite-wide. Importing them (rather than listing
# the module in ``pytest_plugins``) avoids pytest registering the same
# conftest module twice.
from bookings.tests.conftest import (  # noqa: F401
    admin_user,
    booking_factory,
    booking_payload,
    customer_user,
    deluxe_room,
    listing,
    other_customer,
    other_vendor,
    suite_room,
    vendor_user,
)


@pytest.fixture
def api_client():
    """DRF API client for request/response helpers."""
    return APIClient()


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()
