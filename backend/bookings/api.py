"""API viewsets and permissions for bookings."""

from __future__ import annotations

import logging

from django.core.cache import cache
from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from . import errors
from .cache import bookings_cache_key, bookings_cache_timeout
from .domain import can_view_booking
from .filters import BookingFilter
from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingStatusSerializer
from .services import place_booking, transition_booking_status
from .stats import vendor_booking_stats

logger = logging.getLogger(__name__)


class IsVendor(permissions.BasePermission):
    message = "Only vendors can view booking stats."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_vendor())


class BookingViewSet(viewsets.GenericViewSet):
    """Create, list, read and move bookings through their lifecycle."""

    serializer_class = BookingSerializer
    permission_classes = (permissions.IsAuthenticated,)
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilter
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_permissions(self):
        if self.action == "create":
            return [permissions.AllowAny()]
        if self.action == "stats":
            return [IsVendor()]
        return super().get_permissions()

    def _base_queryset(self):
        return (
            Booking.objects.select_related("listing", "settlement")
            .prefetch_related("line_items")
            .order_by("-created_at", "-id")
        )

    def get_queryset(self):
        """Scope bookings to what the caller's role may see."""
        user = self.request.user
        if not user.is_authenticated:
            return Booking.objects.none()
        queryset = self._base_queryset()
        if user.is_admin():
            return queryset
        if user.is_vendor():
            return queryset.filter(vendor=user)
        match = Q(customer=user)
        email = (user.email or "").strip()
        if email:
            match |= Q(customer_email__iexact=email)
        return queryset.filter(match)

    def _load(self, pk) -> Booking:
        booking = self._base_queryset().filter(pk=pk).first()
        if booking is None:
            raise errors.NotFoundError("Booking not found")
        return booking

    def list(self, request, *args, **kwargs):
        cache_key = bookings_cache_key(request.user, request.query_params)
        payload = cache.get(cache_key)
        if payload is None:
            queryset = self.filter_queryset(self.get_queryset())
            bookings = list(self.get_serializer(queryset, many=True).data)
            payload = {"success": True, "bookings": bookings}
            cache.set(cache_key, payload, timeout=bookings_cache_timeout())
        return Response(payload)

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = place_booking(serializer.to_request(), customer_user=request.user)
        data = self.get_serializer(self._load(booking.pk)).data
        return Response({"success": True, "booking": data}, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None, *args, **kwargs):
        booking = self._load(pk)
        if not can_view_booking(request.user, booking):
            raise PermissionDenied("You do not have access to this booking.")
        return Response({"success": True, "booking": self.get_serializer(booking).data})

    def partial_update(self, request, pk=None, *args, **kwargs):
        """Apply a status transition: body ``{status, reason?}``."""
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = transition_booking_status(
            int(pk),
            serializer.validated_data["status"],
            user=request.user,
            reason=serializer.validated_data.get("reason"),
        )
        data = self.get_serializer(self._load(booking.pk)).data
        return Response({"success": True, "booking": data})

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request, *args, **kwargs):
        """Dashboard numbers for the authenticated vendor."""
        payload = vendor_booking_stats(request.user)
        return Response({"success": True, **payload})
