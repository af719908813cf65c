"""
Tests for the commission split, the append-only ledger and the financial
reporting endpoints.
"""
from decimal import Decimal

import pytest

from ledger.models import Transaction
from ledger.services import record_payment, split_amount
from platform_settings import store
from users.models import UserProfile


@pytest.mark.parametrize(
    "amount,percentage,expected",
    [
        ("1000.00", "10", ("100", "900.00")),
        ("1005.00", "10", ("101", "904.00")),  # 100.5 rounds half up
        ("999.00", "12.5", ("125", "874.00")),  # 124.875
        ("1000.00", "0", ("0", "1000.00")),
    ],
)
def test_split_amount(amount, percentage, expected):
    commission, organizer = split_amount(Decimal(amount), Decimal(percentage))
    assert (commission, organizer) == (Decimal(expected[0]), Decimal(expected[1]))
    assert commission + organizer == Decimal(amount)


@pytest.mark.django_db
def test_record_payment_writes_linked_rows(intent_factory, event, organizer):
    intent = intent_factory()
    entry = record_payment(intent, event)

    assert entry.commission_amount == Decimal("100")
    assert entry.organizer_amount == Decimal("900.00")

    payment = Transaction.objects.get(payment_intent=intent, type=Transaction.TYPE_PAYMENT)
    commission = Transaction.objects.get(payment_intent=intent, type=Transaction.TYPE_COMMISSION)
    assert payment.amount == Decimal("1000.00")
    assert commission.amount == Decimal("100.00")
    assert payment.user == organizer and commission.user == organizer
    assert payment.related_transaction_id == commission.pk
    assert commission.related_transaction_id == payment.pk
    assert payment.metadata["commissionPercentage"] == "10"

    profile = UserProfile.objects.get(user=organizer)
    assert profile.total_earnings == Decimal("900.00")
    assert profile.pending_earnings == Decimal("900.00")
    assert profile.withdrawn_amount == Decimal("0.00")


@pytest.mark.django_db
def test_record_payment_twice_credits_once(intent_factory, event, organizer):
    intent = intent_factory()
    first = record_payment(intent, event)
    second = record_payment(intent, event)

    assert second.payment_txn.pk == first.payment_txn.pk
    assert Transaction.objects.filter(payment_intent=intent).count() == 2
    assert UserProfile.objects.get(user=organizer).pending_earnings == Decimal("900.00")


@pytest.mark.django_db
def test_commission_percentage_comes_from_settings(intent_factory, event):
    store.set_value(store.ADMIN_COMMISSION_PERCENTAGE, 15)
    entry = record_payment(intent_factory(), event)
    assert entry.commission_amount == Decimal("150")


@pytest.mark.django_db
def test_transactions_are_immutable(intent_factory, event):
    entry = record_payment(intent_factory(), event)
    payment = Transaction.objects.get(pk=entry.payment_txn.pk)
    payment.amount = Decimal("1.00")
    with pytest.raises(ValueError):
        payment.save()


@pytest.mark.django_db
def test_organizer_dashboard(organizer_client, intent_factory, event):
    record_payment(intent_factory(), event)
    record_payment(intent_factory(), event)

    resp = organizer_client.get("/api/financial/dashboard/")
    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(str(body["balances"]["pendingEarnings"])) == Decimal("1800.00")
    assert Decimal(str(body["balances"]["availableBalance"])) == Decimal("1800.00")

    [row] = body["earningsBreakdown"]
    assert row["eventTitle"] == "Nairobi Tech Summit"
    assert row["ticketsSold"] == 2
    assert Decimal(str(row["totalAmount"])) == Decimal("2000.00")
    assert Decimal(str(row["commissionPaid"])) == Decimal("200.00")
    assert Decimal(str(row["organizerEarnings"])) == Decimal("1800.00")
    assert len(body["recentTransactions"]) == 4


@pytest.mark.django_db
def test_dashboard_is_for_organizers_only(auth_client):
    assert auth_client.get("/api/financial/dashboard/").status_code == 403


@pytest.mark.django_db
def test_admin_overview(admin_api_client, organizer_client, intent_factory, event):
    record_payment(intent_factory(), event)

    resp = admin_api_client.get("/api/admin/financial/overview/")
    assert resp.status_code == 200
    stats = resp.json()["stats"]
    assert Decimal(str(stats["totalRevenue"])) == Decimal("1000.00")
    assert Decimal(str(stats["totalCommissions"])) == Decimal("100.00")
    assert Decimal(str(stats["organizerEarnings"])) == Decimal("900.00")
    assert stats["totalTransactions"] == 1

    assert organizer_client.get("/api/admin/financial/overview/").status_code == 403
