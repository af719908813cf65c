"""
Common test fixtures for Django REST Framework API tests.

Provides an attendee, an organizer and a platform admin, each with a
JWT-authenticated test client, a published event, and a fake payment
gateway installed as the process-wide gateway.
"""
import itertools
from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth.models import User
from django.test import Client

from events.models import Event
from gateway.client import PesapalGateway, reset_gateway
from platform_settings import store
from users.models import UserProfile

PASSWORD = "pass12345"


def _authenticate(username):
    client = Client()
    resp = client.post(
        "/api/token/",
        {"username": username, "password": PASSWORD},
        content_type="application/json",
    )
    assert resp.status_code == 200
    client.defaults["HTTP_AUTHORIZATION"] = f"Bearer {resp.json()['access']}"
    return client


def _make_user(username, role=UserProfile.ROLE_ATTENDEE, **extra):
    user = User.objects.create_user(
        username=username, password=PASSWORD, email=f"{username}@example.com", **extra
    )
    profile = user.profile
    profile.role = role
    profile.full_name = f"{username.title()} Tester"
    profile.phone = "+254700000000"
    profile.save()
    return user


@pytest.fixture
def user(db):
    """An attendee who buys tickets."""
    return _make_user("u1")


@pytest.fixture
def organizer(db):
    return _make_user("org1", role=UserProfile.ROLE_ORGANIZER)


@pytest.fixture
def platform_admin(db):
    return _make_user("boss", role=UserProfile.ROLE_ADMIN, is_staff=True)


@pytest.fixture
def auth_client(db, user):
    """Authenticate a Django test client as the attendee using JWT tokens."""
    return _authenticate(user.username)


@pytest.fixture
def other_client(db):
    """A second attendee with no tickets of their own."""
    _make_user("u2")
    return _authenticate("u2")


@pytest.fixture
def organizer_client(db, organizer):
    return _authenticate(organizer.username)


@pytest.fixture
def admin_api_client(db, platform_admin):
    return _authenticate(platform_admin.username)


@pytest.fixture
def event(db, organizer):
    """A published event priced at 1000 with room for 100 attendees."""
    return Event.objects.create(
        organizer=organizer,
        title="Nairobi Tech Summit",
        description="Annual meetup",
        location="Nairobi",
        price=Decimal("1000.00"),
        max_attendees=100,
        status=Event.STATUS_PUBLISHED,
    )


@pytest.fixture
def ipn_registered(db):
    store.set_value(store.PESAPAL_IPN_ID, "ipn-test-1", "Pesapal IPN notification ID")
    store.set_value(store.PESAPAL_IPN_URL, "https://api.example.com/api/payments/ipn/", "Pesapal IPN notification URL")


@pytest.fixture
def fake_gateway():
    """A mocked PesapalGateway installed as the process-wide gateway.

    Orders get sequential tracking ids (OT-0001, OT-0002, ...).  The
    status read reports a completed payment unless a test changes
    ``get_transaction_status.return_value``.
    """
    gateway = mock.Mock(spec=PesapalGateway)
    counter = itertools.count(1)

    def submit(payload):
        tracking_id = f"OT-{next(counter):04d}"
        return {
            "order_tracking_id": tracking_id,
            "merchant_reference": payload["id"],
            "redirect_url": f"https://cybqa.pesapal.com/pesapaliframe/PesapalIframe3/Index?OrderTrackingId={tracking_id}",
            "error": None,
            "status": "200",
        }

    gateway.submit_order.side_effect = submit
    gateway.register_ipn.return_value = {"ipn_id": "ipn-new", "url": "https://api.example.com/api/payments/ipn/"}
    gateway.get_transaction_status.return_value = {
        "status_code": 1,
        "payment_status_description": "Completed",
        "confirmation_code": "QK12345XYZ",
        "payment_method": "MpesaKE",
        "status": "200",
    }
    reset_gateway(gateway)
    yield gateway
    reset_gateway(None)


@pytest.fixture
def intent_factory(db, user, event):
    """Create PENDING payment intents as if an order had been submitted."""
    from payments.models import PaymentIntent

    counter = itertools.count(1)

    def make(tracking_id=None, payer=None, target_event=None, amount=None):
        n = next(counter)
        target_event = target_event or event
        return PaymentIntent.objects.create(
            payer=payer or user,
            event=target_event,
            merchant_reference=f"EVP-1700000000000-{n:08X}",
            order_tracking_id=tracking_id or f"OT-F{n:03d}",
            amount=amount if amount is not None else target_event.price,
            currency=target_event.currency,
        )

    return make
