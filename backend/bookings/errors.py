"""Error taxonomy for booking creation and status transitions."""

from __future__ import annotations

from rest_framework import status


class BookingError(Exception):
    """Base error; carries a client-safe message and the HTTP status to surface."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Booking request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    default_message = "Invalid booking request."


class InvalidDateRangeError(ValidationError):
    default_message = "Invalid check-in/out dates."


class EmptyLineItemsError(ValidationError):
    default_message = "At least one room booking is required."


class InvalidQuantityError(ValidationError):
    default_message = "Invalid room quantity."


class MissingCustomerInfoError(ValidationError):
    default_message = "Guest name and email are required."


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class LineItemNotFoundError(NotFoundError):
    default_message = "Requested room was not found on this listing."

    def __init__(self, reference: str, label: str = "room"):
        self.reference = reference
        super().__init__(f"{label.capitalize()} {reference} not found")


class AvailabilityError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Requested dates are not available."


class UnauthorizedTransitionError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to change this booking."


class InvalidTransitionError(BookingError):
    default_message = "This status change is not allowed."


class PersistenceError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to save booking."
