import django_filters as filters

from .models import Booking


class BookingFilter(filters.FilterSet):
    status = filters.ChoiceFilter(field_name="status", choices=Booking.Status.choices)
    vendorId = filters.NumberFilter(method="filter_vendor")

    class Meta:
        model = Booking
        fields = ["status", "vendorId"]

    def filter_vendor(self, queryset, name, value):
        # Only admins can look across vendors; everyone else is already scoped.
        user = getattr(self.request, "user", None)
        if value is None or user is None or not user.is_authenticated or not user.is_admin():
            return queryset
        return queryset.filter(vendor_id=int(value))
