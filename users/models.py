"""
Models for the users app.

A `UserProfile` model extends the built-in `auth.User` with the role used
for authorization (attendee, organizer, admin), the billing identity sent
to the payment gateway, and an organizer's running earnings balances.
The `UserProfile` is created automatically via signals when a new user
instance is saved.

Balances are only ever mutated by the ledger (credit on ticket sale) and
by the payout workflow (debit on payout completion), both under a row
lock on the profile.
"""
from decimal import Decimal

from django.contrib.auth.models import User
from django.db import models


class UserProfile(models.Model):
    """Extension of Django's built-in User model."""

    ROLE_ATTENDEE = "attendee"
    ROLE_ORGANIZER = "organizer"
    ROLE_ADMIN = "admin"
    ROLE_CHOICES = [
        (ROLE_ATTENDEE, "Attendee"),
        (ROLE_ORGANIZER, "Organizer"),
        (ROLE_ADMIN, "Admin"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_ATTENDEE, db_index=True)
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    organization_name = models.CharField(max_length=255, blank=True)

    # Financial tracking (organizers)
    total_earnings = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    pending_earnings = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    withdrawn_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Profile<{self.user.username}>"

    def billing_name(self) -> tuple[str, str]:
        """Split the display name into (first, last) for gateway billing."""
        name = (self.full_name or self.user.get_full_name() or self.user.username or "").strip()
        parts = name.split(" ", 1)
        first = parts[0] if parts else ""
        last = parts[1] if len(parts) > 1 else ""
        return first, last
