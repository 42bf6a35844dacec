import django_filters as filters

from .models import Settlement


class SettlementFilter(filters.FilterSet):
    status = filters.ChoiceFilter(field_name="status", choices=Settlement.Status.choices)
    vendorId = filters.NumberFilter(field_name="vendor_id")
    bookingId = filters.NumberFilter(field_name="booking_id")

    class Meta:
        model = Settlement
        fields = ["status", "vendorId", "bookingId"]
