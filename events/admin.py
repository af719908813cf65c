"""
Admin configuration for the events app.

Events are created and edited here; the public API only sells tickets for
them.  The attendee counter is read-only because ticket issuance owns it.
"""
from django.contrib import admin

from .models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "organizer", "status", "price", "current_attendees", "max_attendees", "is_active")
    list_filter = ("status", "is_active")
    search_fields = ("title", "organizer__username", "organizer__email")
    readonly_fields = ("current_attendees",)
    prepopulated_fields = {"slug": ("title",)}
