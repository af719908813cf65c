from django.contrib import admin

from .models import Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("code", "event", "owner", "status", "price", "purchased_at", "used_at", "is_active")
    list_filter = ("status", "is_active")
    search_fields = ("code", "order_tracking_id", "owner__username", "owner__email")
    readonly_fields = (
        "code", "owner", "event", "payment_intent", "order_tracking_id",
        "qr_payload", "qr_code_url", "price", "currency", "purchased_at", "used_at", "checked_in_by",
    )

    def has_delete_permission(self, request, obj=None):
        return False
