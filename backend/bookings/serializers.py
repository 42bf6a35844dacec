"""Serializers for booking-related API endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings
from rest_framework import serializers

from listings.bookable import LineItemRef

from .domain import (
    MAX_GUEST_COUNT,
    BookingRequest,
    CustomerInfo,
    GuestCounts,
    LineItemRequest,
)
from .models import Booking, BookingLineItem


class RoomRequestSerializer(serializers.Serializer):
    roomId = serializers.IntegerField(required=False, allow_null=True)
    roomName = serializers.CharField(required=False, allow_blank=True, max_length=140)
    # Kept raw so quantity problems surface as InvalidQuantityError after the
    # room itself has been resolved.
    quantity = serializers.JSONField(required=False, allow_null=True)
    pricePerNight = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
        allow_null=True,
    )
    taxes = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
        allow_null=True,
    )
    addons = serializers.ListField(
        child=serializers.CharField(max_length=120),
        required=False,
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs.get("roomId") is None and not (attrs.get("roomName") or "").strip():
            raise serializers.ValidationError("Each room needs a roomId or roomName.")
        return attrs

    def to_line_item(self, attrs: dict[str, Any]) -> LineItemRequest:
        return LineItemRequest(
            ref=LineItemRef(
                option_id=attrs.get("roomId"),
                name=(attrs.get("roomName") or "").strip(),
            ),
            quantity=attrs.get("quantity", 1),
            price_per_night=attrs.get("pricePerNight"),
            taxes=attrs.get("taxes"),
            addons=tuple(attrs.get("addons") or ()),
        )


class CustomerSerializer(serializers.Serializer):
    fullName = serializers.CharField(required=False, allow_blank=True, max_length=150)
    name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True)


class GuestsSerializer(serializers.Serializer):
    adults = serializers.IntegerField(required=False, default=1, max_value=MAX_GUEST_COUNT)
    children = serializers.IntegerField(
        required=False, default=0, min_value=0, max_value=MAX_GUEST_COUNT
    )
    infants = serializers.IntegerField(
        required=False, default=0, min_value=0, max_value=MAX_GUEST_COUNT
    )


class BookingCreateSerializer(serializers.Serializer):
    """
    Parse the create-booking payload into a ``BookingRequest``.

    Only shape is checked here. Dates, rooms, customer details and quantities
    are validated by the booking domain so every caller gets the same errors.
    """

    stayId = serializers.IntegerField()
    checkIn = serializers.CharField(required=False, allow_blank=True)
    checkOut = serializers.CharField(required=False, allow_blank=True)
    rooms = RoomRequestSerializer(many=True, required=False)
    guests = GuestsSerializer(required=False)
    customer = CustomerSerializer(required=False, allow_null=True)
    currency = serializers.CharField(required=False, allow_blank=True, max_length=8)
    fees = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
    )
    notes = serializers.CharField(required=False, allow_blank=True)
    source = serializers.CharField(required=False, allow_blank=True, max_length=40)

    def to_request(self) -> BookingRequest:
        data = self.validated_data
        customer_data = data.get("customer")
        customer = None
        if customer_data is not None:
            customer = CustomerInfo(
                full_name=customer_data.get("fullName") or customer_data.get("name") or "",
                email=customer_data.get("email", ""),
                phone=customer_data.get("phone", ""),
                notes=customer_data.get("notes", ""),
            )
        guests_data = data.get("guests") or {}
        room_serializer = RoomRequestSerializer()
        return BookingRequest(
            listing_id=data["stayId"],
            check_in=data.get("checkIn"),
            check_out=data.get("checkOut"),
            line_items=tuple(
                room_serializer.to_line_item(room) for room in data.get("rooms") or ()
            ),
            customer=customer,
            guests=GuestCounts(
                adults=guests_data.get("adults", 1),
                children=guests_data.get("children", 0),
                infants=guests_data.get("infants", 0),
            ),
            currency=(data.get("currency") or settings.BOOKING_DEFAULT_CURRENCY).upper(),
            fees=data.get("fees") or Decimal("0"),
            notes=data.get("notes", ""),
            source=data.get("source") or "web",
        )


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class BookingLineItemSerializer(serializers.ModelSerializer):
    roomId = serializers.IntegerField(source="option_id", read_only=True)
    roomName = serializers.CharField(source="name", read_only=True)
    pricePerNight = serializers.DecimalField(
        source="price_per_night", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = BookingLineItem
        fields = ("roomId", "roomName", "quantity", "pricePerNight", "taxes", "nights", "total", "addons")
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Serialize Booking instances for API usage."""

    stayId = serializers.IntegerField(source="listing_id", read_only=True)
    stayName = serializers.CharField(source="listing.name", read_only=True)
    listingKind = serializers.CharField(source="listing.kind", read_only=True)
    vendorId = serializers.IntegerField(source="vendor_id", read_only=True)
    customerId = serializers.IntegerField(source="customer_id", read_only=True, allow_null=True)
    customer = serializers.SerializerMethodField()
    checkIn = serializers.DateTimeField(source="check_in", read_only=True)
    checkOut = serializers.DateTimeField(source="check_out", read_only=True)
    guests = serializers.SerializerMethodField()
    rooms = BookingLineItemSerializer(source="line_items", many=True, read_only=True)
    totalAmount = serializers.DecimalField(
        source="total_amount", max_digits=14, decimal_places=2, read_only=True
    )
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    cancelledAt = serializers.DateTimeField(source="cancelled_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    settlement = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = (
            "id",
            "stayId",
            "stayName",
            "listingKind",
            "vendorId",
            "customerId",
            "customer",
            "checkIn",
            "checkOut",
            "nights",
            "guests",
            "rooms",
            "currency",
            "subtotal",
            "taxes",
            "fees",
            "totalAmount",
            "status",
            "paymentStatus",
            "metadata",
            "cancelledAt",
            "createdAt",
            "updatedAt",
            "settlement",
        )
        read_only_fields = fields

    def get_customer(self, booking: Booking) -> dict[str, str]:
        return {
            "fullName": booking.customer_name,
            "email": booking.customer_email,
            "phone": booking.customer_phone,
            "notes": booking.customer_notes,
        }

    def get_guests(self, booking: Booking) -> dict[str, int]:
        return {
            "adults": booking.adults,
            "children": booking.children,
            "infants": booking.infants,
        }

    def get_settlement(self, booking: Booking) -> dict[str, Any] | None:
        settlement = getattr(booking, "settlement", None)
        if settlement is None:
            return None
        return {
            "id": settlement.id,
            "amountDue": str(settlement.amount_due),
            "scheduledDate": serializers.DateTimeField().to_representation(
                settlement.scheduled_date
            ),
            "status": settlement.status,
        }
