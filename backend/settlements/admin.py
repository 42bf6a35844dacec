from django.contrib import admin

from .models import Settlement


@admin.register(Settlement)
class SettlementAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "vendor", "amount_due", "amount_paid", "status", "scheduled_date")
    list_filter = ("status",)
    raw_id_fields = ("booking", "listing", "vendor")
