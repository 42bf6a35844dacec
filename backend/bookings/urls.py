"""URL routing for the bookings API."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .api import BookingViewSet

app_name = "bookings"

# No browsable API root: the empty prefix belongs to the booking list.
router = SimpleRouter()
router.register("", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
