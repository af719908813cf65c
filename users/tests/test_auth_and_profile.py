"""
Tests for JWT login, automatic profile creation and role permissions.
"""
import pytest
from django.contrib.auth.models import User

from common.permissions import is_admin, is_organizer
from users.models import UserProfile


@pytest.mark.django_db
def test_profile_created_with_user():
    user = User.objects.create_user(username="alice", password="pass12345")
    profile = UserProfile.objects.get(user=user)
    assert profile.role == UserProfile.ROLE_ATTENDEE
    assert profile.pending_earnings == 0

    # saving again does not create a second profile
    user.save()
    assert UserProfile.objects.filter(user=user).count() == 1


@pytest.mark.django_db
def test_login_returns_tokens(client, user):
    resp = client.post("/api/token/", {"username": "u1", "password": "pass12345"}, content_type="application/json")
    assert resp.status_code == 200
    assert {"access", "refresh"} <= set(resp.json())


@pytest.mark.django_db
def test_protected_endpoints_need_a_token(client):
    assert client.get("/api/tickets/mine/").status_code == 401


@pytest.mark.django_db
def test_billing_name_split(user):
    profile = user.profile
    assert profile.billing_name() == ("U1", "Tester")

    profile.full_name = "Wanjiru"
    assert profile.billing_name() == ("Wanjiru", "")


@pytest.mark.django_db
def test_roles(user, organizer, platform_admin):
    assert not is_admin(user) and not is_organizer(user)
    assert is_organizer(organizer) and not is_admin(organizer)
    assert is_admin(platform_admin)

    platform_admin.is_staff = False
    assert is_admin(platform_admin)  # role alone is enough
