"""App configuration for the bookings domain."""

from django.apps import AppConfig


class BookingsConfig(AppConfig):
    """Register the bookings app and its cache invalidation signals."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "bookings"

    def ready(self) -> None:
        from . import signals  # noqa: F401
