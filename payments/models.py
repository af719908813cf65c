"""
Database models for the payments app.

A `PaymentIntent` is one purchase attempt at the gateway.  It is created
by the order service once the gateway has accepted the order, and from
then on only the reconciliation service changes it.  Rows are never
deleted: the notification log and the raw gateway response are the
audit trail for what the gateway told us and when.
"""
from __future__ import annotations

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from common.state_machine import can_transition
from events.models import Event


class PaymentIntent(models.Model):
    STATUS_PENDING = "PENDING"
    STATUS_COMPLETED = "COMPLETED"
    STATUS_FAILED = "FAILED"
    STATUS_REVERSED = "REVERSED"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REVERSED, "Reversed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # COMPLETED is reachable only from PENDING and can only be left for REVERSED
    TRANSITIONS = {
        STATUS_PENDING: (STATUS_COMPLETED, STATUS_FAILED, STATUS_REVERSED, STATUS_CANCELLED),
        STATUS_COMPLETED: (STATUS_REVERSED,),
        STATUS_FAILED: (),
        STATUS_REVERSED: (),
        STATUS_CANCELLED: (),
    }

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payment_intents",
    )
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="payment_intents")
    merchant_reference = models.CharField(max_length=64, unique=True)
    order_tracking_id = models.CharField(max_length=128, unique=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=8, default=settings.GATEWAY_CURRENCY)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    status_description = models.CharField(max_length=255, blank=True, default="")
    confirmation_code = models.CharField(max_length=128, blank=True, default="")
    gateway_response = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    notifications = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.merchant_reference} [{self.status}]"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_keys = (instance.__dict__.get("merchant_reference"), instance.__dict__.get("order_tracking_id"))
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, "_loaded_keys", None)
        if loaded and loaded != (self.merchant_reference, self.order_tracking_id):
            raise ValueError("merchant_reference and order_tracking_id are immutable once assigned")
        super().save(*args, **kwargs)

    def can_transition_to(self, target: str) -> bool:
        return can_transition(self.TRANSITIONS, self.status, target)

    def append_notification(self, channel: str, notification_type: str = "", data=None, attempt=None) -> dict:
        entry = {
            "channel": channel,
            "notification_type": notification_type or "",
            "received_at": timezone.now().isoformat(),
            "data": data or {},
        }
        if attempt is not None:
            entry["attempt"] = attempt
        self.notifications = [*(self.notifications or []), entry]
        return entry
