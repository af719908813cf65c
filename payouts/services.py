"""
Payout workflow.

``pending -> approved -> (processing ->) completed`` with ``rejected`` and
``cancelled`` as exits from ``pending``.  Requests and completions for
one organizer are serialized by locking their ``UserProfile`` row, so two
concurrent requests cannot both spend the same available balance.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from common.state_machine import check_transition
from ledger.models import Transaction
from ledger.services import available_balance
from platform_settings import store
from users.models import UserProfile
from .exceptions import InvalidTransition, PayoutError
from .models import PayoutRequest

logger = logging.getLogger(__name__)


def _locked_payout(payout: PayoutRequest) -> PayoutRequest:
    return PayoutRequest.objects.select_for_update().get(pk=payout.pk)


def _move(payout: PayoutRequest, target: str) -> None:
    check_transition(PayoutRequest.TRANSITIONS, payout.status, target, "payout request", error=InvalidTransition)


def request_payout(user, amount: Decimal, method: str, details: dict | None = None) -> PayoutRequest:
    amount = Decimal(amount)
    minimum = store.get_decimal(store.MINIMUM_PAYOUT_AMOUNT)
    with transaction.atomic():
        profile = UserProfile.objects.select_for_update().select_related("user").get(user=user)
        available = available_balance(profile)
        if amount < minimum:
            raise PayoutError(
                f"Minimum payout amount is {minimum}",
                minimum_amount=minimum,
                available_balance=available,
            )
        if amount > available:
            raise PayoutError(
                "Insufficient available balance",
                available_balance=available,
                requestedAmount=amount,
            )
        payout = PayoutRequest.objects.create(
            requester=user,
            amount=amount,
            payout_method=method,
            payout_details=details or {},
        )
    logger.info("Payout %s requested by user=%s amount=%s via %s", payout.pk, user.pk, amount, method)
    return payout


def approve(payout: PayoutRequest, reviewer, admin_notes: str = "") -> PayoutRequest:
    with transaction.atomic():
        payout = _locked_payout(payout)
        _move(payout, PayoutRequest.STATUS_APPROVED)
        payout.status = PayoutRequest.STATUS_APPROVED
        payout.reviewed_by = reviewer
        payout.reviewed_at = timezone.now()
        payout.admin_notes = admin_notes or ""
        payout.save(update_fields=["status", "reviewed_by", "reviewed_at", "admin_notes", "updated_at"])
    logger.info("Payout %s approved by user=%s", payout.pk, reviewer.pk)
    return payout


def reject(payout: PayoutRequest, reviewer, reason: str, admin_notes: str = "") -> PayoutRequest:
    if not (reason or "").strip():
        raise PayoutError("Rejection reason is required")
    with transaction.atomic():
        payout = _locked_payout(payout)
        _move(payout, PayoutRequest.STATUS_REJECTED)
        payout.status = PayoutRequest.STATUS_REJECTED
        payout.reviewed_by = reviewer
        payout.reviewed_at = timezone.now()
        payout.rejection_reason = reason.strip()
        payout.admin_notes = admin_notes or ""
        payout.save(
            update_fields=["status", "reviewed_by", "reviewed_at", "rejection_reason", "admin_notes", "updated_at"]
        )
    logger.info("Payout %s rejected by user=%s: %s", payout.pk, reviewer.pk, payout.rejection_reason)
    return payout


def mark_processing(payout: PayoutRequest, reviewer) -> PayoutRequest:
    with transaction.atomic():
        payout = _locked_payout(payout)
        _move(payout, PayoutRequest.STATUS_PROCESSING)
        payout.status = PayoutRequest.STATUS_PROCESSING
        payout.processed_at = timezone.now()
        payout.save(update_fields=["status", "processed_at", "updated_at"])
    logger.info("Payout %s marked processing by user=%s", payout.pk, reviewer.pk)
    return payout


def complete(payout: PayoutRequest, reviewer, external_reference: str = "", notes: str = "") -> PayoutRequest:
    with transaction.atomic():
        # profile first, same lock order as request_payout
        profile = UserProfile.objects.select_for_update().get(user_id=payout.requester_id)
        payout = _locked_payout(payout)
        _move(payout, PayoutRequest.STATUS_COMPLETED)

        payout_txn = Transaction.objects.create(
            type=Transaction.TYPE_PAYOUT,
            user_id=payout.requester_id,
            amount=payout.amount,
            currency=payout.currency,
            status=Transaction.STATUS_COMPLETED,
            description="Payout to organizer",
            metadata={
                "payoutRequestId": payout.pk,
                "payoutMethod": payout.payout_method,
                "externalReference": external_reference or "",
                "adminNotes": notes or "",
            },
        )
        UserProfile.objects.filter(pk=profile.pk).update(
            pending_earnings=F("pending_earnings") - payout.amount,
            withdrawn_amount=F("withdrawn_amount") + payout.amount,
        )

        payout.status = PayoutRequest.STATUS_COMPLETED
        payout.transaction = payout_txn
        payout.external_reference = external_reference or ""
        if notes:
            payout.admin_notes = notes
        if not payout.processed_at:
            payout.processed_at = timezone.now()
        payout.save(
            update_fields=["status", "transaction", "external_reference", "admin_notes", "processed_at", "updated_at"]
        )
    logger.info(
        "Payout %s completed by user=%s amount=%s ref=%s",
        payout.pk, reviewer.pk, payout.amount, payout.external_reference,
    )
    return payout


def cancel(payout: PayoutRequest, user) -> PayoutRequest:
    if payout.requester_id != user.pk:
        raise PayoutError("Payout request not found")
    with transaction.atomic():
        payout = _locked_payout(payout)
        _move(payout, PayoutRequest.STATUS_CANCELLED)
        payout.status = PayoutRequest.STATUS_CANCELLED
        payout.save(update_fields=["status", "updated_at"])
    logger.info("Payout %s cancelled by requester=%s", payout.pk, user.pk)
    return payout
