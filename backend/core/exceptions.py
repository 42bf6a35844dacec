"""DRF exception handler rendering the ``{success: false, message}`` envelope."""

from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from bookings.errors import BookingError

logger = logging.getLogger(__name__)
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


def _first_message(detail) -> str:
    """Flatten DRF error details into a single readable message."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_message(value)
            if field in ("non_field_errors", "detail"):
                return message
            return f"{field}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def failure_response(message: str, status_code: int, headers=None) -> Response:
    return Response(
        {"success": False, "message": message},
        status=status_code,
        headers=headers,
    )


def api_exception_handler(exc, context):
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else "unknown"

    if isinstance(exc, BookingError):
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("api: %s failed in %s", type(exc).__name__, view_name)
        return failure_response(exc.message, exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            message = _first_message(exc.detail) or "Invalid request."
        else:
            message = _first_message(response.data) or str(exc)
        headers = {
            name: response[name]
            for name in ("WWW-Authenticate", "Retry-After")
            if response.has_header(name)
        }
        return failure_response(message, response.status_code, headers=headers or None)

    logger.exception("api: unhandled error in %s", view_name, exc_info=exc)
    return failure_response(GENERIC_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
