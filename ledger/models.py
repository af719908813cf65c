"""
Append-only money movements.

Every completed ticket sale writes one ``payment`` row (gross amount) and
one ``commission`` row (platform cut), cross-linked through
``related_transaction``.  The partial unique constraint guarantees a
payment intent is never credited twice, whatever the caller does.
Completed payouts write a ``payout`` row.
"""
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q


class Transaction(models.Model):
    TYPE_PAYMENT = "payment"
    TYPE_COMMISSION = "commission"
    TYPE_PAYOUT = "payout"
    TYPE_DEPOSIT = "deposit"
    TYPE_REFUND = "refund"
    TYPE_CHOICES = [
        (TYPE_PAYMENT, "Payment"),
        (TYPE_COMMISSION, "Commission"),
        (TYPE_PAYOUT, "Payout"),
        (TYPE_DEPOSIT, "Deposit"),
        (TYPE_REFUND, "Refund"),
    ]

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    type = models.CharField(max_length=16, choices=TYPE_CHOICES, db_index=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="ledger_transactions")
    event = models.ForeignKey(
        "events.Event", on_delete=models.PROTECT, null=True, blank=True, related_name="ledger_transactions"
    )
    payment_intent = models.ForeignKey(
        "payments.PaymentIntent",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_transactions",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=8, default=settings.GATEWAY_CURRENCY)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED, db_index=True)
    description = models.CharField(max_length=255, blank=True, default="")
    related_transaction = models.ForeignKey(
        "self", on_delete=models.PROTECT, null=True, blank=True, related_name="+"
    )
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["payment_intent", "type"],
                condition=Q(type__in=["payment", "commission"]),
                name="ledger_one_split_per_payment_intent",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.type} {self.amount} {self.currency} ({self.user_id})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Ledger transactions are immutable once written")
        super().save(*args, **kwargs)
