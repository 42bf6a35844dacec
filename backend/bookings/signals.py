from __future__ import annotations

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .cache import invalidate_bookings_cache
from .models import Booking


@receiver(post_save, sender=Booking, dispatch_uid="bookings_cache_invalidate_on_save")
@receiver(post_delete, sender=Booking, dispatch_uid="bookings_cache_invalidate_on_delete")
def _invalidate_booking_cache(sender, instance: Booking, **kwargs):
    # Bump only once the write is visible, or a concurrent list read could
    # cache the pre-commit rows under the new version.
    transaction.on_commit(invalidate_bookings_cache)
