from django.contrib import admin

from .models import Booking, BookingLineItem


class BookingLineItemInline(admin.TabularInline):
    model = BookingLineItem
    extra = 0
    readonly_fields = ("option", "name", "quantity", "price_per_night", "taxes", "nights", "total")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "listing", "vendor", "customer_email", "check_in", "status", "total_amount")
    list_filter = ("status", "payment_status")
    search_fields = ("customer_email", "customer_name")
    raw_id_fields = ("listing", "vendor", "customer")
    inlines = [BookingLineItemInline]
