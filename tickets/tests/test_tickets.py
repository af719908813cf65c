"""
Tests for ticket issuance, check-in and cancellation.
"""
import json
from unittest import mock

import pytest
from django.db import IntegrityError

from events.models import Event
from payments.exceptions import IssueError
from tickets.models import Ticket
from tickets.services import check_in, issue_ticket
from tickets.utils import generate_ticket_code


def test_ticket_code_format():
    code = generate_ticket_code()
    prefix, millis, suffix = code.split("-")
    assert prefix == "TKT"
    assert millis.isdigit()
    assert len(suffix) == 8 and suffix == suffix.upper()


@pytest.mark.django_db
def test_issue_ticket_is_idempotent(intent_factory, event, user):
    intent = intent_factory()
    first = issue_ticket(intent)
    second = issue_ticket(intent)
    assert first.pk == second.pk
    assert Ticket.objects.count() == 1
    event.refresh_from_db()
    assert event.current_attendees == 1

    payload = json.loads(first.qr_payload)
    assert payload["ticketCode"] == first.code
    assert payload["orderTrackingId"] == intent.order_tracking_id
    assert payload["userId"] == str(user.pk)
    assert payload["eventId"] == str(event.pk)


@pytest.mark.django_db
def test_lost_race_returns_winner_without_counting(intent_factory, event):
    intent = intent_factory()
    winner = issue_ticket(intent)

    # simulate a concurrent issuer that passed the existence check before the winner committed
    real_filter = Ticket.objects.filter
    calls = {"n": 0}

    def filter_once_empty(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            return Ticket.objects.none()
        return real_filter(*args, **kwargs)

    with mock.patch.object(Ticket.objects, "filter", side_effect=filter_once_empty):
        loser = issue_ticket(intent)

    assert loser.pk == winner.pk
    event.refresh_from_db()
    assert event.current_attendees == 1


@pytest.mark.django_db
def test_issue_failure_raises_issue_error(intent_factory):
    intent = intent_factory()
    with mock.patch("tickets.services.render_qr_data_url", side_effect=ValueError("too long")):
        with pytest.raises(IssueError):
            issue_ticket(intent)
    assert not Ticket.objects.exists()


@pytest.mark.django_db
def test_issuance_does_not_recheck_capacity(intent_factory, event):
    Event.objects.filter(pk=event.pk).update(max_attendees=1, current_attendees=1)
    ticket = issue_ticket(intent_factory())
    assert ticket.status == Ticket.STATUS_VALID
    event.refresh_from_db()
    assert event.current_attendees == 2


@pytest.fixture
def ticket(intent_factory):
    return issue_ticket(intent_factory())


@pytest.mark.django_db
def test_my_tickets(auth_client, ticket):
    resp = auth_client.get("/api/tickets/mine/")
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert [t["code"] for t in results] == [ticket.code]
    assert results[0]["event"]["title"] == "Nairobi Tech Summit"


@pytest.mark.django_db
def test_ticket_detail_permissions(auth_client, organizer_client, admin_api_client, other_client, ticket):
    assert auth_client.get(f"/api/tickets/{ticket.code}/").status_code == 200
    assert organizer_client.get(f"/api/tickets/{ticket.code}/").status_code == 200
    assert admin_api_client.get(f"/api/tickets/{ticket.code}/").status_code == 200

    assert other_client.get(f"/api/tickets/{ticket.code}/").status_code == 403
    assert auth_client.get("/api/tickets/TKT-0-NOPE/").status_code == 404


@pytest.mark.django_db
def test_check_in_by_organizer(organizer_client, organizer, ticket):
    resp = organizer_client.post("/api/tickets/check-in/", {"ticketCode": ticket.code}, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["valid"] is True
    ticket.refresh_from_db()
    assert ticket.status == Ticket.STATUS_USED
    assert ticket.used_at is not None
    assert ticket.checked_in_by == organizer

    again = organizer_client.post("/api/tickets/check-in/", {"ticketCode": ticket.code}, content_type="application/json")
    assert again.status_code == 400
    assert again.json()["valid"] is False
    assert again.json()["message"] == "Ticket is used"


@pytest.mark.django_db
def test_attendee_cannot_check_in(auth_client, ticket):
    resp = auth_client.post("/api/tickets/check-in/", {"ticketCode": ticket.code}, content_type="application/json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_check_in_unknown_ticket(organizer_client):
    resp = organizer_client.post("/api/tickets/check-in/", {"ticketCode": "TKT-1-ABCDEF12"}, content_type="application/json")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_owner_cancels_ticket(auth_client, ticket, event):
    resp = auth_client.patch(f"/api/tickets/{ticket.code}/cancel/")
    assert resp.status_code == 200
    ticket.refresh_from_db()
    assert ticket.status == Ticket.STATUS_CANCELLED
    event.refresh_from_db()
    assert event.current_attendees == 0

    again = auth_client.patch(f"/api/tickets/{ticket.code}/cancel/")
    assert again.status_code == 400
    assert again.json()["message"] == "Cannot cancel ticket with status: cancelled"


@pytest.mark.django_db
def test_only_owner_cancels(organizer_client, ticket):
    assert organizer_client.patch(f"/api/tickets/{ticket.code}/cancel/").status_code == 403


@pytest.mark.django_db
def test_used_ticket_cannot_be_checked_in_twice_via_service(ticket):
    check_in(ticket.code)
    from tickets.exceptions import TicketStateError

    with pytest.raises(TicketStateError):
        check_in(ticket.code)


@pytest.mark.django_db
def test_order_tracking_id_is_unique_in_database(intent_factory):
    intent = intent_factory()
    issue_ticket(intent)
    other = intent_factory()
    with pytest.raises(IntegrityError):
        Ticket.objects.create(
            owner=other.payer,
            event=other.event,
            payment_intent=other,
            order_tracking_id=intent.order_tracking_id,
            code="TKT-1-DEADBEEF",
            qr_payload="{}",
            price=other.amount,
        )
