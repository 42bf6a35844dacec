from django.contrib import admin

from .models import Listing, ListingOption


class ListingOptionInline(admin.TabularInline):
    model = ListingOption
    extra = 0


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "vendor", "city", "is_active", "created_at")
    list_filter = ("kind", "is_active")
    search_fields = ("name", "city")
    inlines = [ListingOptionInline]
