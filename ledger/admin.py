from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "user", "event", "amount", "currency", "status", "created_at")
    list_filter = ("type", "status", "currency")
    search_fields = ("user__username", "description", "payment_intent__order_tracking_id")
    ordering = ("-created_at",)

    # the ledger is append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
