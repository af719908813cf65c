"""
Models for the tickets app.

A `Ticket` is issued exactly once per completed payment.  The unique
``order_tracking_id`` is what makes issuance idempotent: a second insert
for the same gateway order fails at the database and the existing ticket
is used instead.  Tickets are never deleted, only moved out of
``valid`` or deactivated.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from events.models import Event
from payments.models import PaymentIntent


class Ticket(models.Model):
    STATUS_VALID = "valid"
    STATUS_USED = "used"
    STATUS_CANCELLED = "cancelled"
    STATUS_REFUNDED = "refunded"
    STATUS_CHOICES = [
        (STATUS_VALID, "Valid"),
        (STATUS_USED, "Used"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_REFUNDED, "Refunded"),
    ]
    TRANSITIONS = {
        STATUS_VALID: (STATUS_USED, STATUS_CANCELLED, STATUS_REFUNDED),
        STATUS_USED: (),
        STATUS_CANCELLED: (),
        STATUS_REFUNDED: (),
    }

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="tickets")
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    payment_intent = models.OneToOneField(PaymentIntent, on_delete=models.PROTECT, related_name="ticket")
    order_tracking_id = models.CharField(max_length=128, unique=True)
    code = models.CharField(max_length=64, unique=True)
    qr_payload = models.CharField(max_length=512, unique=True)
    qr_code_url = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_VALID, db_index=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=8, default=settings.GATEWAY_CURRENCY)
    purchased_at = models.DateTimeField(default=timezone.now)
    used_at = models.DateTimeField(null=True, blank=True)
    checked_in_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-purchased_at"]

    def __str__(self) -> str:
        return f"{self.code} [{self.status}]"

    @property
    def is_valid(self) -> bool:
        return self.is_active and self.status == self.STATUS_VALID
