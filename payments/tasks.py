"""
Celery tasks for the payments app.

The IPN endpoint acknowledges the gateway immediately and hands the work
to :func:`reconcile_ipn_notification`.  Transient failures are retried
with exponential backoff.  When retries run out the intent simply stays
PENDING and :func:`sweep_pending_intents`, scheduled by celery beat,
picks it up later.  The sweep only acts on final gateway codes, so a payer
who is still on the checkout page is never marked FAILED by it.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .exceptions import AuthError, GatewayUnavailable, IssueError, LedgerError, PaymentsError, ReconciliationNotFound
from .models import PaymentIntent
from .reconciliation import CHANNEL_IPN, CHANNEL_SWEEP, reconcile

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (GatewayUnavailable, AuthError, IssueError, LedgerError)


@shared_task(
    bind=True,
    autoretry_for=RETRYABLE_ERRORS,
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=5,
)
def reconcile_ipn_notification(self, order_tracking_id: str, notification_type: str = "", payload: dict | None = None):
    """Reconcile one IPN notification.

    Args:
        order_tracking_id: The gateway's OrderTrackingId.
        notification_type: OrderNotificationType as sent by the gateway.
        payload: The raw notification body, stored on the intent.
    """
    try:
        result = reconcile(
            order_tracking_id,
            channel=CHANNEL_IPN,
            notification_type=notification_type,
            payload=payload,
            attempt=self.request.retries,
        )
    except ReconciliationNotFound:
        logger.warning("IPN for unknown order_tracking_id=%s dropped", order_tracking_id)
        return None
    except RETRYABLE_ERRORS as exc:
        if self.request.retries >= self.max_retries:
            logger.error(
                "IPN reconciliation for order_tracking_id=%s failed after %s retries, left for sweep: %s",
                order_tracking_id, self.request.retries, exc,
            )
        else:
            logger.warning(
                "IPN reconciliation for order_tracking_id=%s failed (attempt %s), retrying: %s",
                order_tracking_id, self.request.retries + 1, exc,
            )
        raise
    return {"orderTrackingId": order_tracking_id, "status": result.status, "changed": result.changed}


@shared_task
def sweep_pending_intents() -> dict:
    """Re-reconcile PENDING intents whose notification may have been lost."""
    now = timezone.now()
    min_age = timedelta(seconds=settings.RECONCILE_SWEEP_MIN_AGE_SECONDS)
    max_age = timedelta(hours=settings.RECONCILE_SWEEP_MAX_AGE_HOURS)
    tracking_ids = list(
        PaymentIntent.objects.filter(
            status=PaymentIntent.STATUS_PENDING,
            created_at__lte=now - min_age,
            created_at__gte=now - max_age,
        ).values_list("order_tracking_id", flat=True)
    )

    changed = failed = 0
    for tracking_id in tracking_ids:
        try:
            result = reconcile(
                tracking_id, channel=CHANNEL_SWEEP, notification_type="SWEEP", definitive_only=True
            )
        except PaymentsError as exc:
            failed += 1
            logger.warning("Sweep could not reconcile order_tracking_id=%s: %s", tracking_id, exc)
            continue
        if result.changed:
            changed += 1

    logger.info("Pending intent sweep: checked=%s changed=%s failed=%s", len(tracking_ids), changed, failed)
    return {"checked": len(tracking_ids), "changed": changed, "failed": failed}
