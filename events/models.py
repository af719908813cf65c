"""
Models for the events app.

An `Event` is owned by an organizer and sold through the payment gateway
at a fixed price.  Capacity is optional: ``max_attendees`` of ``None``
means unlimited.  ``current_attendees`` is maintained by ticket issuance
and cancellation using ``F()`` updates, never read-modify-write.
"""
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils.text import slugify
import uuid


class Event(models.Model):
    """Represents a ticketed event."""
    STATUS_DRAFT = "draft"
    STATUS_PUBLISHED = "published"
    STATUS_CANCELLED = "cancelled"
    STATUS_ENDED = "ended"
    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_PUBLISHED, "Published"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_ENDED, "Ended"),
    ]
    organizer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="organized_events")
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=8, default=settings.GATEWAY_CURRENCY)
    max_attendees = models.PositiveIntegerField(null=True, blank=True)
    current_attendees = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    is_active = models.BooleanField(default=True)
    # Meta
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = f"{slugify(self.title) or 'event'}-{uuid.uuid4().hex[:8]}"
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.title

    @property
    def remaining_capacity(self):
        if not self.max_attendees:
            return None
        return max(0, self.max_attendees - self.current_attendees)

    @property
    def is_sold_out(self) -> bool:
        return bool(self.max_attendees) and self.current_attendees >= self.max_attendees

    @property
    def is_purchasable(self) -> bool:
        return self.is_active and self.status == self.STATUS_PUBLISHED
