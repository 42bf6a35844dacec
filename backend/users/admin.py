from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "full_name", "account_type", "is_staff", "is_active")
    list_filter = BaseUserAdmin.list_filter + ("account_type",)
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("account_type", "full_name", "contact_number")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Marketplace", {"fields": ("account_type", "full_name", "contact_number")}),
    )
