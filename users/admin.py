"""
Admin configuration for the users app.

This module unregisters the default `User` admin and re-registers it with
an inline profile form so that roles and organizer balances are visible
via the Django admin.  Balances are read-only here: they change only
through the ledger and payout workflow.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User

from .models import UserProfile


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    readonly_fields = ("total_earnings", "pending_earnings", "withdrawn_amount")


class UserAdmin(BaseUserAdmin):
    inlines = [UserProfileInline]
    list_display = ("username", "email", "is_active", "is_staff", "date_joined")


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "pending_earnings", "withdrawn_amount", "total_earnings")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email", "full_name", "organization_name")
    readonly_fields = ("total_earnings", "pending_earnings", "withdrawn_amount")


# Unregister the default User admin and register the customized one
admin.site.unregister(User)
admin.site.register(User, UserAdmin)
