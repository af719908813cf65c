"""
Serializers for the users app.

Only the compact representations embedded by the payment, ticket and
payout endpoints live here; account management is handled elsewhere.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserMiniSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "email", "full_name")

    def get_full_name(self, obj):
        profile = getattr(obj, "profile", None)
        return (getattr(profile, "full_name", "") or obj.get_full_name() or obj.username)

