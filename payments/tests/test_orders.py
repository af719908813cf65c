"""
Tests for gateway order creation and IPN registration.
"""
from decimal import Decimal

import pytest

from events.models import Event
from payments.exceptions import GatewayUnavailable
from payments.models import PaymentIntent
from platform_settings import store


@pytest.mark.django_db
def test_create_order_submits_then_persists(auth_client, event, fake_gateway, ipn_registered, user):
    resp = auth_client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["order_tracking_id"] == "OT-0001"
    assert body["merchant_reference"].startswith("EVP-")
    assert body["redirect_url"].endswith("OT-0001")
    assert Decimal(str(body["amount"])) == Decimal("1000")
    assert body["currency"] == "KES"

    payload = fake_gateway.submit_order.call_args.args[0]
    assert payload["id"] == body["merchant_reference"]
    assert payload["description"] == "Nairobi Tech Summit - Ticket Purchase"
    assert payload["notification_id"] == "ipn-test-1"
    assert payload["redirect_mode"] == "TOP_WINDOW"
    assert payload["callback_url"] == "https://tickets.example.com/payment/callback"
    assert payload["billing_address"] == {
        "email_address": "u1@example.com",
        "phone_number": "+254700000000",
        "country_code": "KE",
        "first_name": "U1",
        "last_name": "Tester",
    }

    intent = PaymentIntent.objects.get(order_tracking_id="OT-0001")
    assert intent.status == PaymentIntent.STATUS_PENDING
    assert intent.payer == user
    assert intent.amount == Decimal("1000.00")
    assert intent.gateway_response["order_tracking_id"] == "OT-0001"


@pytest.mark.django_db
def test_merchant_references_are_unique(auth_client, event, fake_gateway, ipn_registered):
    refs = set()
    for _ in range(3):
        resp = auth_client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
        refs.add(resp.json()["merchant_reference"])
    assert len(refs) == 3


@pytest.mark.django_db
def test_unpublished_event_is_unavailable(auth_client, event, fake_gateway, ipn_registered):
    Event.objects.filter(pk=event.pk).update(status=Event.STATUS_DRAFT)
    resp = auth_client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
    assert resp.status_code == 404
    assert resp.json()["code"] == "event_unavailable"
    fake_gateway.submit_order.assert_not_called()


@pytest.mark.django_db
def test_missing_event_is_unavailable(auth_client, fake_gateway, ipn_registered):
    resp = auth_client.post("/api/payments/orders/", {"eventId": 999}, content_type="application/json")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_sold_out_event(auth_client, event, fake_gateway, ipn_registered):
    Event.objects.filter(pk=event.pk).update(max_attendees=5, current_attendees=5)
    resp = auth_client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Event is sold out"
    assert not PaymentIntent.objects.exists()


@pytest.mark.django_db
def test_setup_required_without_ipn_id(auth_client, event, fake_gateway):
    resp = auth_client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Payment setup incomplete. Please contact support."
    assert body["setupRequired"] is True
    fake_gateway.submit_order.assert_not_called()


@pytest.mark.django_db
def test_gateway_failure_persists_nothing(auth_client, event, fake_gateway, ipn_registered):
    fake_gateway.submit_order.side_effect = GatewayUnavailable()
    resp = auth_client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
    assert resp.status_code == 502
    assert resp.json()["code"] == "gateway_error"
    assert not PaymentIntent.objects.exists()


@pytest.mark.django_db
def test_order_requires_authentication(client, event):
    resp = client.post("/api/payments/orders/", {"eventId": event.id}, content_type="application/json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_admin_registers_ipn(admin_api_client, fake_gateway, platform_admin):
    resp = admin_api_client.post(
        "/api/payments/ipn/register/",
        {"url": "https://api.example.com/api/payments/ipn/", "ipn_notification_type": "POST"},
        content_type="application/json",
    )
    assert resp.status_code == 200
    assert resp.json()["ipn_id"] == "ipn-new"
    fake_gateway.register_ipn.assert_called_once_with("https://api.example.com/api/payments/ipn/", "POST")
    assert store.get_value(store.PESAPAL_IPN_ID) == "ipn-new"
    assert store.get_value(store.PESAPAL_IPN_URL) == "https://api.example.com/api/payments/ipn/"


@pytest.mark.django_db
def test_ipn_registration_requires_https(admin_api_client, fake_gateway):
    resp = admin_api_client.post(
        "/api/payments/ipn/register/", {"url": "http://api.example.com/ipn/"}, content_type="application/json"
    )
    assert resp.status_code == 400
    fake_gateway.register_ipn.assert_not_called()


@pytest.mark.django_db
def test_ipn_registration_is_admin_only(organizer_client, fake_gateway):
    resp = organizer_client.post(
        "/api/payments/ipn/register/", {"url": "https://api.example.com/ipn/"}, content_type="application/json"
    )
    assert resp.status_code == 403
