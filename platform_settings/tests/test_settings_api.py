"""
Tests for the settings store and the admin financial settings endpoint.
"""
from decimal import Decimal

import pytest

from platform_settings import store
from platform_settings.models import Setting


@pytest.mark.django_db
def test_store_falls_back_to_defaults():
    assert store.get_value("missing", "fallback") == "fallback"
    assert store.get_decimal(store.ADMIN_COMMISSION_PERCENTAGE) == Decimal("10")
    assert store.get_decimal(store.MINIMUM_PAYOUT_AMOUNT) == Decimal("1000")
    assert store.get_decimal(store.ORGANIZATION_DEPOSIT_AMOUNT) == Decimal("5000")


@pytest.mark.django_db
def test_set_value_upserts(platform_admin):
    store.set_value(store.PESAPAL_IPN_ID, "abc", "IPN id")
    store.set_value(store.PESAPAL_IPN_ID, "def", "IPN id", updated_by=platform_admin)
    row = Setting.objects.get(key=store.PESAPAL_IPN_ID)
    assert row.value == "def"
    assert row.is_system is True
    assert row.updated_by == platform_admin
    assert Setting.objects.filter(key=store.PESAPAL_IPN_ID).count() == 1


@pytest.mark.django_db
def test_admin_reads_effective_settings(admin_api_client):
    resp = admin_api_client.get("/api/admin/settings/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["adminCommissionPercentage"] == 10
    assert body["minimumPayoutAmount"] == 1000
    assert body["organizationDepositAmount"] == 5000


@pytest.mark.django_db
def test_admin_updates_subset(admin_api_client, platform_admin):
    resp = admin_api_client.patch(
        "/api/admin/settings/",
        {"adminCommissionPercentage": "12.5"},
        content_type="application/json",
    )
    assert resp.status_code == 200
    assert resp.json()["updatedSettings"] == {"adminCommissionPercentage": 12.5}
    assert store.get_decimal(store.ADMIN_COMMISSION_PERCENTAGE) == Decimal("12.50")
    assert Setting.objects.get(key=store.ADMIN_COMMISSION_PERCENTAGE).updated_by == platform_admin
    # untouched keys keep their defaults
    assert not Setting.objects.filter(key=store.MINIMUM_PAYOUT_AMOUNT).exists()


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload",
    [
        {"adminCommissionPercentage": 51},
        {"adminCommissionPercentage": -1},
        {"minimumPayoutAmount": -5},
        {"organizationDepositAmount": -0.01},
    ],
)
def test_admin_update_rejects_out_of_range(admin_api_client, payload):
    resp = admin_api_client.patch("/api/admin/settings/", payload, content_type="application/json")
    assert resp.status_code == 400
    assert not Setting.objects.exists()


@pytest.mark.django_db
def test_non_admin_cannot_touch_settings(auth_client, organizer_client):
    assert auth_client.get("/api/admin/settings/").status_code == 403
    resp = organizer_client.patch(
        "/api/admin/settings/", {"minimumPayoutAmount": 1}, content_type="application/json"
    )
    assert resp.status_code == 403
