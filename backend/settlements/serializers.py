from rest_framework import serializers

from .models import Settlement


class SettlementSerializer(serializers.ModelSerializer):
    bookingId = serializers.IntegerField(source="booking_id", read_only=True)
    stayId = serializers.IntegerField(source="listing_id", read_only=True)
    vendorId = serializers.IntegerField(source="vendor_id", read_only=True)
    amountDue = serializers.DecimalField(
        source="amount_due", max_digits=14, decimal_places=2, read_only=True
    )
    amountPaid = serializers.DecimalField(
        source="amount_paid", max_digits=14, decimal_places=2, read_only=True
    )
    scheduledDate = serializers.DateTimeField(source="scheduled_date", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Settlement
        fields = (
            "id",
            "bookingId",
            "stayId",
            "vendorId",
            "amountDue",
            "amountPaid",
            "currency",
            "scheduledDate",
            "status",
            "notes",
            "createdAt",
            "updatedAt",
        )
        read_only_fields = fields
