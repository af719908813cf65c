"""
Ledger writes and financial reporting.

``record_payment`` runs inside the reconciliation transaction that marks a
payment COMPLETED, so the two ledger rows, the organizer credit and the
status change commit or roll back together.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, F, Sum

from payments.exceptions import LedgerError
from payouts.models import PayoutRequest
from platform_settings import store
from users.models import UserProfile
from .models import Transaction

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
WHOLE_UNIT = Decimal("1")


@dataclass
class LedgerEntry:
    payment_txn: Transaction
    commission_txn: Transaction
    organizer_amount: Decimal
    commission_amount: Decimal


def split_amount(amount: Decimal, percentage: Decimal) -> tuple[Decimal, Decimal]:
    """Return (commission, organizer_share); commission rounds half-up to whole units."""
    commission = (amount * percentage / Decimal("100")).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
    return commission, amount - commission


def _existing_entry(payment_intent) -> LedgerEntry | None:
    rows = {
        t.type: t
        for t in Transaction.objects.filter(
            payment_intent=payment_intent,
            type__in=[Transaction.TYPE_PAYMENT, Transaction.TYPE_COMMISSION],
        )
    }
    if Transaction.TYPE_PAYMENT not in rows or Transaction.TYPE_COMMISSION not in rows:
        return None
    commission = rows[Transaction.TYPE_COMMISSION]
    return LedgerEntry(
        payment_txn=rows[Transaction.TYPE_PAYMENT],
        commission_txn=commission,
        organizer_amount=rows[Transaction.TYPE_PAYMENT].amount - commission.amount,
        commission_amount=commission.amount,
    )


def record_payment(payment_intent, event) -> LedgerEntry:
    existing = _existing_entry(payment_intent)
    if existing is not None:
        logger.info("Ledger split already recorded for order_tracking_id=%s", payment_intent.order_tracking_id)
        return existing

    percentage = store.get_decimal(store.ADMIN_COMMISSION_PERCENTAGE)
    amount = payment_intent.amount
    commission_amount, organizer_amount = split_amount(amount, percentage)

    try:
        with transaction.atomic():
            profile = UserProfile.objects.select_for_update().get(user_id=event.organizer_id)
            payment_txn = Transaction.objects.create(
                type=Transaction.TYPE_PAYMENT,
                user_id=event.organizer_id,
                event=event,
                payment_intent=payment_intent,
                amount=amount,
                currency=payment_intent.currency,
                status=Transaction.STATUS_COMPLETED,
                description=f"Ticket purchase for {event.title}",
                metadata={
                    "originalAmount": str(amount),
                    "commissionAmount": str(commission_amount),
                    "organizerAmount": str(organizer_amount),
                    "commissionPercentage": str(percentage),
                },
            )
            commission_txn = Transaction.objects.create(
                type=Transaction.TYPE_COMMISSION,
                user_id=event.organizer_id,
                event=event,
                payment_intent=payment_intent,
                amount=commission_amount,
                currency=payment_intent.currency,
                status=Transaction.STATUS_COMPLETED,
                description=f"Admin commission ({percentage}%) from {event.title}",
                related_transaction=payment_txn,
                metadata={
                    "commissionPercentage": str(percentage),
                    "originalPayment": str(amount),
                    "organizerAmount": str(organizer_amount),
                },
            )
            # rows are immutable through save(); the back-link is the one sanctioned update
            Transaction.objects.filter(pk=payment_txn.pk).update(related_transaction=commission_txn)
            payment_txn.related_transaction = commission_txn

            UserProfile.objects.filter(pk=profile.pk).update(
                total_earnings=F("total_earnings") + organizer_amount,
                pending_earnings=F("pending_earnings") + organizer_amount,
            )
    except IntegrityError as exc:
        existing = _existing_entry(payment_intent)
        if existing is None:
            raise LedgerError(details={"orderTrackingId": payment_intent.order_tracking_id}) from exc
        return existing
    except (DatabaseError, UserProfile.DoesNotExist) as exc:
        raise LedgerError(details={"orderTrackingId": payment_intent.order_tracking_id}) from exc

    logger.info(
        "Ledger split recorded for order_tracking_id=%s: gross=%s commission=%s organizer=%s (organizer=%s)",
        payment_intent.order_tracking_id, amount, commission_amount, organizer_amount, event.organizer_id,
    )
    return LedgerEntry(
        payment_txn=payment_txn,
        commission_txn=commission_txn,
        organizer_amount=organizer_amount,
        commission_amount=commission_amount,
    )


def available_balance(profile: UserProfile) -> Decimal:
    """Pending earnings not yet reserved by an open payout request."""
    return profile.pending_earnings - PayoutRequest.objects.open_total(profile.user)


def organizer_dashboard(user) -> dict:
    profile = UserProfile.objects.get(user=user)
    open_payouts = list(PayoutRequest.objects.open().filter(requester=user).order_by("-requested_at"))
    pending_payout_amount = sum((p.amount for p in open_payouts), ZERO)

    completed = Transaction.objects.filter(user=user, status=Transaction.STATUS_COMPLETED)
    sales = (
        completed.filter(type=Transaction.TYPE_PAYMENT)
        .values("event_id", "event__title")
        .annotate(total_amount=Sum("amount"), tickets_sold=Count("id"))
        .order_by("-total_amount")
    )
    commissions = dict(
        completed.filter(type=Transaction.TYPE_COMMISSION)
        .values("event_id")
        .annotate(total=Sum("amount"))
        .values_list("event_id", "total")
    )
    breakdown = []
    for row in sales:
        commission_paid = commissions.get(row["event_id"]) or ZERO
        breakdown.append(
            {
                "eventId": row["event_id"],
                "eventTitle": row["event__title"],
                "totalAmount": row["total_amount"],
                "ticketsSold": row["tickets_sold"],
                "commissionPaid": commission_paid,
                "organizerEarnings": row["total_amount"] - commission_paid,
            }
        )

    return {
        "balances": {
            "totalEarnings": profile.total_earnings,
            "pendingEarnings": profile.pending_earnings,
            "withdrawnAmount": profile.withdrawn_amount,
            "availableBalance": max(ZERO, profile.pending_earnings - pending_payout_amount),
            "pendingPayoutAmount": pending_payout_amount,
        },
        "earningsBreakdown": breakdown,
        "recentTransactions": list(completed.select_related("event")[:10]),
        "pendingPayouts": open_payouts,
    }


def admin_overview() -> dict:
    completed = Transaction.objects.filter(status=Transaction.STATUS_COMPLETED)
    payments = completed.filter(type=Transaction.TYPE_PAYMENT).aggregate(total=Sum("amount"), count=Count("id"))
    commissions = completed.filter(type=Transaction.TYPE_COMMISSION).aggregate(total=Sum("amount"))
    pending = list(
        PayoutRequest.objects.filter(status=PayoutRequest.STATUS_PENDING)
        .select_related("requester__profile")
        .order_by("requested_at")
    )
    total_revenue = payments["total"] or ZERO
    total_commissions = commissions["total"] or ZERO
    return {
        "stats": {
            "totalRevenue": total_revenue,
            "totalCommissions": total_commissions,
            "organizerEarnings": total_revenue - total_commissions,
            "totalTransactions": payments["count"],
            "pendingPayouts": len(pending),
            "pendingPayoutAmount": sum((p.amount for p in pending), ZERO),
        },
        "pendingPayouts": pending,
        "recentTransactions": list(completed.select_related("event", "user")[:20]),
    }
