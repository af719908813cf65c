"""
Django admin registration for the payments app.

Payment intents are read-only here; their status is owned by
reconciliation.
"""
from django.contrib import admin

from .models import PaymentIntent


@admin.register(PaymentIntent)
class PaymentIntentAdmin(admin.ModelAdmin):
    list_display = (
        "merchant_reference",
        "order_tracking_id",
        "event",
        "payer",
        "status",
        "amount",
        "currency",
        "created_at",
        "completed_at",
    )
    list_filter = ("status", "currency")
    search_fields = ("merchant_reference", "order_tracking_id", "payer__username", "payer__email")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
