"""
Payment reconciliation.

The IPN push (via a Celery task), the client callback pull and the stale
intent sweep all end up in :func:`reconcile`.  They may run concurrently
and repeatedly for the same order; the outcome is the same as running
once:

1. the raw notification is appended to the intent's log in its own short
   transaction, so it survives whatever happens next (sweep passes are
   only logged when they change the status);
2. the authoritative status is read from the gateway with no lock held;
3. the status change is applied under ``select_for_update`` on the
   intent, together with ticket issuance and the ledger split when the
   payment completes.  Any failure in step 3 rolls everything back and
   the intent stays PENDING for the next attempt.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from gateway.client import get_gateway
from ledger.services import record_payment
from tickets.services import issue_ticket
from .exceptions import IssueError, LedgerError, ReconciliationNotFound
from .models import PaymentIntent

logger = logging.getLogger(__name__)

CHANNEL_IPN = "ipn"
CHANNEL_CALLBACK = "callback"
CHANNEL_SWEEP = "sweep"

GATEWAY_STATUS_MAP = {
    0: PaymentIntent.STATUS_FAILED,  # INVALID
    1: PaymentIntent.STATUS_COMPLETED,
    2: PaymentIntent.STATUS_FAILED,
    3: PaymentIntent.STATUS_REVERSED,
}

# 0 (INVALID) is also what the gateway reports while the payer is still paying
FINAL_STATUS_CODES = frozenset({1, 2, 3})


@dataclass
class ReconciliationResult:
    payment_intent: PaymentIntent
    status: str
    changed: bool
    ticket: object = None
    status_data: dict | None = None


def map_gateway_status(status_code) -> str:
    try:
        code = int(status_code)
    except (TypeError, ValueError):
        return PaymentIntent.STATUS_FAILED
    return GATEWAY_STATUS_MAP.get(code, PaymentIntent.STATUS_FAILED)


def is_definitive_status(status_code) -> bool:
    """True for the codes that settle a payment: completed, failed, reversed."""
    try:
        return int(status_code) in FINAL_STATUS_CODES
    except (TypeError, ValueError):
        return False


def _record_notification(order_tracking_id, channel, notification_type, payload, attempt=None) -> PaymentIntent:
    with transaction.atomic():
        try:
            intent = PaymentIntent.objects.select_for_update().get(order_tracking_id=order_tracking_id)
        except PaymentIntent.DoesNotExist:
            raise ReconciliationNotFound(details={"orderTrackingId": order_tracking_id}) from None
        intent.append_notification(channel, notification_type, payload, attempt=attempt)
        intent.save(update_fields=["notifications", "updated_at"])
    return intent


def _complete(intent: PaymentIntent, status_data: dict):
    intent.status = PaymentIntent.STATUS_COMPLETED
    intent.status_description = status_data.get("payment_status_description") or ""
    intent.confirmation_code = status_data.get("confirmation_code") or ""
    intent.completed_at = timezone.now()
    intent.save(update_fields=["status", "status_description", "confirmation_code", "completed_at", "updated_at"])

    try:
        ticket = issue_ticket(intent)
    except IssueError:
        raise
    except Exception as exc:
        raise IssueError(details={"orderTrackingId": intent.order_tracking_id}) from exc
    try:
        record_payment(intent, intent.event)
    except LedgerError:
        raise
    except Exception as exc:
        raise LedgerError(details={"orderTrackingId": intent.order_tracking_id}) from exc
    return ticket


def reconcile(order_tracking_id: str, *, channel: str, notification_type: str = "",
              payload: dict | None = None, gateway=None, definitive_only: bool = False,
              attempt: int | None = None) -> ReconciliationResult:
    """Bring the local PaymentIntent in line with the gateway's view of it.

    With ``definitive_only`` only the completed, failed and reversed codes
    are applied; INVALID or unrecognised codes leave the intent untouched,
    since the payer may still be on the checkout page.  The sweep channel
    only writes to the notification log when the status actually changes.

    Raises ``ReconciliationNotFound`` for an unknown tracking id,
    ``GatewayUnavailable``/``GatewayError``/``AuthError`` when the status
    read fails, and ``IssueError``/``LedgerError`` when completion side
    effects fail (the intent is then left PENDING).
    """
    log_upfront = channel != CHANNEL_SWEEP
    if log_upfront:
        _record_notification(order_tracking_id, channel, notification_type, payload, attempt)
    logger.info(
        "Reconciling order_tracking_id=%s channel=%s notification_type=%s",
        order_tracking_id, channel, notification_type or "-",
    )

    gateway = gateway or get_gateway()
    status_data = gateway.get_transaction_status(order_tracking_id)
    target = map_gateway_status(status_data.get("status_code"))

    with transaction.atomic():
        try:
            intent = PaymentIntent.objects.select_for_update().select_related("event").get(
                order_tracking_id=order_tracking_id
            )
        except PaymentIntent.DoesNotExist:
            raise ReconciliationNotFound(details={"orderTrackingId": order_tracking_id}) from None
        current = intent.status
        if definitive_only and not is_definitive_status(status_data.get("status_code")):
            logger.info(
                "Gateway status %s for order_tracking_id=%s is not final, leaving %s",
                status_data.get("status_code"), order_tracking_id, current,
            )
            return ReconciliationResult(intent, current, False, None, status_data)
        if current == target:
            ticket = getattr(intent, "ticket", None) if current == PaymentIntent.STATUS_COMPLETED else None
            return ReconciliationResult(intent, current, False, ticket, status_data)
        if not intent.can_transition_to(target):
            logger.warning(
                "Ignoring gateway status %s for order_tracking_id=%s: %s -> %s is not allowed",
                status_data.get("status_code"), order_tracking_id, current, target,
            )
            return ReconciliationResult(intent, current, False, None, status_data)

        if not log_upfront:
            intent.append_notification(channel, notification_type, payload, attempt=attempt)
            intent.save(update_fields=["notifications", "updated_at"])

        ticket = None
        if target == PaymentIntent.STATUS_COMPLETED:
            ticket = _complete(intent, status_data)
        else:
            intent.status = target
            intent.status_description = status_data.get("payment_status_description") or ""
            intent.save(update_fields=["status", "status_description", "updated_at"])

    logger.info(
        "PaymentIntent %s moved %s -> %s via %s", order_tracking_id, current, target, channel,
    )
    return ReconciliationResult(intent, target, True, ticket, status_data)
