"""
Organizer withdrawal requests.

A `PayoutRequest` reserves part of an organizer's ``pending_earnings``
from the moment it is created until it is rejected, cancelled or
completed.  Only completion moves money: it writes a ``payout`` ledger
row and shifts the amount from pending to withdrawn.
"""
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum


class PayoutRequestQuerySet(models.QuerySet):
    def open(self):
        return self.filter(status__in=PayoutRequest.OPEN_STATUSES)

    def open_total(self, user) -> Decimal:
        """Amount still reserved by the user's unfinished requests."""
        total = self.open().filter(requester=user).aggregate(total=Sum("amount"))["total"]
        return total or Decimal("0.00")


class PayoutRequest(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_PROCESSING = "processing"
    STATUS_REJECTED = "rejected"
    STATUS_CANCELLED = "cancelled"
    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_COMPLETED, "Completed"),
    ]
    OPEN_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_PROCESSING)
    TRANSITIONS = {
        STATUS_PENDING: (STATUS_APPROVED, STATUS_REJECTED, STATUS_CANCELLED),
        STATUS_APPROVED: (STATUS_PROCESSING, STATUS_COMPLETED),
        STATUS_PROCESSING: (STATUS_COMPLETED,),
        STATUS_REJECTED: (),
        STATUS_CANCELLED: (),
        STATUS_COMPLETED: (),
    }

    METHOD_BANK_TRANSFER = "bank_transfer"
    METHOD_MOBILE_MONEY = "mobile_money"
    METHOD_PESAPAL = "pesapal"
    METHOD_CHOICES = [
        (METHOD_BANK_TRANSFER, "Bank transfer"),
        (METHOD_MOBILE_MONEY, "Mobile money"),
        (METHOD_PESAPAL, "Pesapal"),
    ]

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="payout_requests"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=8, default=settings.GATEWAY_CURRENCY)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    payout_method = models.CharField(max_length=32, choices=METHOD_CHOICES)
    payout_details = models.JSONField(default=dict, blank=True)
    requested_at = models.DateTimeField(auto_now_add=True, db_index=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_payouts",
    )
    rejection_reason = models.TextField(blank=True, default="")
    admin_notes = models.TextField(blank=True, default="")
    transaction = models.OneToOneField(
        "ledger.Transaction",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payout_request",
    )
    external_reference = models.CharField(max_length=128, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    objects = PayoutRequestQuerySet.as_manager()

    class Meta:
        ordering = ["-requested_at"]

    def __str__(self) -> str:
        return f"Payout {self.pk} {self.amount} {self.currency} [{self.status}]"
