from django.contrib import admin

from .models import PayoutRequest


@admin.register(PayoutRequest)
class PayoutRequestAdmin(admin.ModelAdmin):
    """Read-only view; review actions go through the API so balances stay consistent."""

    list_display = ("id", "requester", "amount", "currency", "status", "payout_method", "requested_at", "reviewed_by")
    list_filter = ("status", "payout_method")
    search_fields = ("requester__username", "requester__email", "external_reference")
    ordering = ("-requested_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
