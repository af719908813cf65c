"""
Ticket issuance and lifecycle.

``issue_ticket`` is called by reconciliation inside the transaction that
marks a payment COMPLETED.  It must be safe to call any number of times
for the same payment: the unique ``order_tracking_id`` column decides
which caller wins, and losers return the winner's ticket without touching
the attendee counter.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from common.state_machine import check_transition
from events.models import Event
from payments.exceptions import IssueError
from .exceptions import TicketStateError
from .models import Ticket
from .utils import build_qr_payload, generate_ticket_code, render_qr_data_url

logger = logging.getLogger(__name__)


def issue_ticket(payment_intent) -> Ticket:
    tracking_id = payment_intent.order_tracking_id
    existing = Ticket.objects.filter(order_tracking_id=tracking_id).first()
    if existing is not None:
        logger.info("Ticket already exists for order_tracking_id=%s", tracking_id)
        return existing

    issued_at = timezone.now()
    code = generate_ticket_code()
    payload = build_qr_payload(
        ticket_code=code,
        owner_id=payment_intent.payer_id,
        event_id=payment_intent.event_id,
        order_tracking_id=tracking_id,
        issued_at=issued_at,
    )
    try:
        qr_code_url = render_qr_data_url(payload)
    except Exception as exc:
        raise IssueError(
            "Failed to render ticket QR code", details={"orderTrackingId": tracking_id}
        ) from exc

    try:
        with transaction.atomic():
            ticket = Ticket.objects.create(
                owner_id=payment_intent.payer_id,
                event_id=payment_intent.event_id,
                payment_intent=payment_intent,
                order_tracking_id=tracking_id,
                code=code,
                qr_payload=payload,
                qr_code_url=qr_code_url,
                status=Ticket.STATUS_VALID,
                price=payment_intent.amount,
                currency=payment_intent.currency,
                purchased_at=issued_at,
            )
            Event.objects.filter(pk=payment_intent.event_id).update(
                current_attendees=F("current_attendees") + 1
            )
    except IntegrityError as exc:
        existing = Ticket.objects.filter(order_tracking_id=tracking_id).first()
        if existing is None:
            raise IssueError(details={"orderTrackingId": tracking_id}) from exc
        logger.info("Concurrent issuance lost the race for order_tracking_id=%s", tracking_id)
        return existing
    except DatabaseError as exc:
        raise IssueError(details={"orderTrackingId": tracking_id}) from exc

    logger.info(
        "Ticket %s issued for order_tracking_id=%s event=%s owner=%s",
        ticket.code, tracking_id, payment_intent.event_id, payment_intent.payer_id,
    )
    return ticket


def check_in(ticket_code: str, checked_in_by=None) -> Ticket:
    """Mark a valid ticket as used. Raises ``Ticket.DoesNotExist`` or ``TicketStateError``."""
    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().get(code=ticket_code)
        if not ticket.is_active:
            raise TicketStateError("inactive", Ticket.STATUS_USED)
        check_transition(Ticket.TRANSITIONS, ticket.status, Ticket.STATUS_USED, "ticket", error=TicketStateError)
        ticket.status = Ticket.STATUS_USED
        ticket.used_at = timezone.now()
        ticket.checked_in_by = checked_in_by
        ticket.save(update_fields=["status", "used_at", "checked_in_by", "updated_at"])
    logger.info("Ticket %s checked in by user=%s", ticket.code, getattr(checked_in_by, "pk", None))
    return ticket


def cancel_ticket(ticket: Ticket, user) -> Ticket:
    """Owner cancels their own valid ticket and frees the seat."""
    if ticket.owner_id != user.pk:
        raise PermissionError("Not authorized to cancel this ticket")
    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().get(pk=ticket.pk)
        check_transition(
            Ticket.TRANSITIONS, ticket.status, Ticket.STATUS_CANCELLED, "ticket", error=TicketStateError
        )
        ticket.status = Ticket.STATUS_CANCELLED
        ticket.save(update_fields=["status", "updated_at"])
        Event.objects.filter(pk=ticket.event_id, current_attendees__gt=0).update(
            current_attendees=F("current_attendees") - 1
        )
    logger.info("Ticket %s cancelled by owner=%s", ticket.code, user.pk)
    return ticket
