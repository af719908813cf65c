"""
Tests for the payout request and review workflow.
"""
import threading
from decimal import Decimal

import pytest
from django.db import connection

from ledger.models import Transaction
from payouts import services
from payouts.exceptions import InvalidTransition, PayoutError
from payouts.models import PayoutRequest
from platform_settings import store
from users.models import UserProfile


@pytest.fixture
def funded(organizer):
    """Organizer with 5000 of pending earnings and a minimum payout of 100."""
    UserProfile.objects.filter(user=organizer).update(
        total_earnings=Decimal("5000.00"), pending_earnings=Decimal("5000.00")
    )
    store.set_value(store.MINIMUM_PAYOUT_AMOUNT, 100)
    return organizer


def _profile(user):
    return UserProfile.objects.get(user=user)


@pytest.mark.django_db
def test_open_requests_reserve_balance(organizer):
    UserProfile.objects.filter(user=organizer).update(pending_earnings=Decimal("1000.00"))
    store.set_value(store.MINIMUM_PAYOUT_AMOUNT, 100)
    PayoutRequest.objects.create(requester=organizer, amount=Decimal("600.00"), payout_method="mobile_money")

    with pytest.raises(PayoutError) as excinfo:
        services.request_payout(organizer, Decimal("500"), "mobile_money")
    assert excinfo.value.message == "Insufficient available balance"
    assert excinfo.value.to_dict()["availableBalance"] == Decimal("400.00")

    payout = services.request_payout(organizer, Decimal("400"), "mobile_money")
    assert payout.status == PayoutRequest.STATUS_PENDING


@pytest.mark.django_db
def test_minimum_payout_amount(organizer_client, funded):
    store.set_value(store.MINIMUM_PAYOUT_AMOUNT, 1000)
    resp = organizer_client.post(
        "/api/payouts/request/",
        {"amount": "999.99", "payoutMethod": "bank_transfer", "payoutDetails": {"account": "0123"}},
        content_type="application/json",
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Minimum payout amount is 1000"
    assert Decimal(str(body["minAmount"])) == Decimal("1000")
    assert not PayoutRequest.objects.exists()


@pytest.mark.django_db
def test_request_endpoint(organizer_client, funded):
    resp = organizer_client.post(
        "/api/payouts/request/",
        {"amount": "1500.00", "payoutMethod": "mobile_money", "payoutDetails": {"phone": "+254700000000"}},
        content_type="application/json",
    )
    assert resp.status_code == 201
    payout = resp.json()["payoutRequest"]
    assert payout["status"] == "pending"
    assert payout["payout_details"] == {"phone": "+254700000000"}

    listing = organizer_client.get("/api/payouts/")
    assert [p["id"] for p in listing.json()["results"]] == [payout["id"]]


@pytest.mark.django_db
def test_attendees_cannot_request_payouts(auth_client):
    resp = auth_client.post(
        "/api/payouts/request/", {"amount": "100", "payoutMethod": "pesapal"}, content_type="application/json"
    )
    assert resp.status_code == 403


@pytest.mark.django_db
def test_full_payout_conserves_balance(admin_api_client, funded, platform_admin):
    payout = services.request_payout(funded, Decimal("2000"), "bank_transfer", {"account": "0123"})

    resp = admin_api_client.patch(
        f"/api/admin/payouts/{payout.pk}/approve/", {"adminNotes": "ok"}, content_type="application/json"
    )
    assert resp.status_code == 200
    assert resp.json()["payout"]["status"] == "approved"

    resp = admin_api_client.patch(f"/api/admin/payouts/{payout.pk}/processing/", {}, content_type="application/json")
    assert resp.json()["payout"]["status"] == "processing"

    resp = admin_api_client.patch(
        f"/api/admin/payouts/{payout.pk}/complete/",
        {"externalReference": "BANK-778", "notes": "paid"},
        content_type="application/json",
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["payout"]["status"] == "completed"

    payout.refresh_from_db()
    assert payout.reviewed_by == platform_admin
    assert payout.external_reference == "BANK-778"
    txn = Transaction.objects.get(pk=body["transactionId"])
    assert txn.type == Transaction.TYPE_PAYOUT
    assert txn.amount == Decimal("2000.00")
    assert txn.user == funded

    profile = _profile(funded)
    assert profile.pending_earnings == Decimal("3000.00")
    assert profile.withdrawn_amount == Decimal("2000.00")
    assert profile.pending_earnings + profile.withdrawn_amount == profile.total_earnings


@pytest.mark.django_db
def test_approve_twice_is_refused(admin_api_client, funded, platform_admin):
    payout = services.request_payout(funded, Decimal("500"), "pesapal")
    services.approve(payout, platform_admin)

    with pytest.raises(InvalidTransition):
        services.approve(payout, platform_admin)

    resp = admin_api_client.patch(f"/api/admin/payouts/{payout.pk}/approve/", {}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["currentStatus"] == "approved"
    assert _profile(funded).pending_earnings == Decimal("5000.00")


@pytest.mark.django_db
def test_completed_payout_cannot_complete_again(funded, platform_admin):
    payout = services.request_payout(funded, Decimal("500"), "pesapal")
    services.approve(payout, platform_admin)
    services.complete(payout, platform_admin)
    with pytest.raises(InvalidTransition):
        services.complete(payout, platform_admin)
    assert Transaction.objects.filter(type=Transaction.TYPE_PAYOUT).count() == 1
    assert _profile(funded).withdrawn_amount == Decimal("500.00")


@pytest.mark.django_db
def test_pending_payout_cannot_be_completed(funded, platform_admin):
    payout = services.request_payout(funded, Decimal("500"), "pesapal")
    with pytest.raises(InvalidTransition):
        services.complete(payout, platform_admin)
    assert _profile(funded).pending_earnings == Decimal("5000.00")


@pytest.mark.django_db
def test_reject_requires_reason(admin_api_client, funded):
    payout = services.request_payout(funded, Decimal("500"), "pesapal")
    url = f"/api/admin/payouts/{payout.pk}/reject/"

    resp = admin_api_client.patch(url, {"rejectionReason": "  "}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Rejection reason is required"

    resp = admin_api_client.patch(url, {"rejectionReason": "Wrong account"}, content_type="application/json")
    assert resp.status_code == 200
    payout.refresh_from_db()
    assert payout.status == PayoutRequest.STATUS_REJECTED
    assert payout.rejection_reason == "Wrong account"

    # a rejected request no longer reserves balance
    again = services.request_payout(funded, Decimal("5000"), "pesapal")
    assert again.amount == Decimal("5000")


@pytest.mark.django_db
def test_requester_cancels_pending_request(organizer_client, funded, platform_admin):
    payout = services.request_payout(funded, Decimal("500"), "pesapal")
    resp = organizer_client.patch(f"/api/payouts/{payout.pk}/cancel/")
    assert resp.status_code == 200
    assert resp.json()["payout"]["status"] == "cancelled"

    approved = services.request_payout(funded, Decimal("500"), "pesapal")
    services.approve(approved, platform_admin)
    resp = organizer_client.patch(f"/api/payouts/{approved.pk}/cancel/")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_admin_endpoints_require_admin(organizer_client, funded):
    payout = services.request_payout(funded, Decimal("500"), "pesapal")
    assert organizer_client.get("/api/admin/payouts/").status_code == 403
    resp = organizer_client.patch(f"/api/admin/payouts/{payout.pk}/approve/", {}, content_type="application/json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_admin_lists_by_status(admin_api_client, funded, platform_admin):
    first = services.request_payout(funded, Decimal("500"), "pesapal")
    services.request_payout(funded, Decimal("700"), "pesapal")
    services.approve(first, platform_admin)

    resp = admin_api_client.get("/api/admin/payouts/?status=pending")
    assert resp.status_code == 200
    assert [Decimal(p["amount"]) for p in resp.json()["results"]] == [Decimal("700.00")]


@pytest.mark.django_db
def test_requests_together_cannot_exceed_balance(organizer):
    UserProfile.objects.filter(user=organizer).update(pending_earnings=Decimal("1000.00"))
    store.set_value(store.MINIMUM_PAYOUT_AMOUNT, 100)

    services.request_payout(organizer, Decimal("600"), "mobile_money")
    with pytest.raises(PayoutError) as excinfo:
        services.request_payout(organizer, Decimal("600"), "bank_transfer")

    assert excinfo.value.available_balance == Decimal("400.00")
    assert PayoutRequest.objects.open_total(organizer) == Decimal("600.00")


@pytest.mark.django_db(transaction=True)
def test_concurrent_requests_are_serialized_per_requester(organizer):
    if connection.vendor != "postgresql":
        pytest.skip("row locks need PostgreSQL")

    UserProfile.objects.filter(user=organizer).update(pending_earnings=Decimal("1000.00"))
    store.set_value(store.MINIMUM_PAYOUT_AMOUNT, 100)
    barrier = threading.Barrier(2)
    outcomes = []

    def submit():
        try:
            barrier.wait()
            services.request_payout(organizer, Decimal("600"), "mobile_money")
            outcomes.append("accepted")
        except PayoutError:
            outcomes.append("refused")
        finally:
            connection.close()

    threads = [threading.Thread(target=submit) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["accepted", "refused"]
    assert PayoutRequest.objects.open_total(organizer) == Decimal("600.00")
