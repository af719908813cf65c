from decimal import Decimal

from rest_framework import serializers

from users.serializers import UserMiniSerializer
from .models import PayoutRequest


class PayoutRequestSerializer(serializers.ModelSerializer):
    requester = UserMiniSerializer(read_only=True)

    class Meta:
        model = PayoutRequest
        fields = (
            "id",
            "requester",
            "amount",
            "currency",
            "status",
            "payout_method",
            "payout_details",
            "requested_at",
            "reviewed_at",
            "processed_at",
            "reviewed_by",
            "rejection_reason",
            "admin_notes",
            "transaction",
            "external_reference",
        )
        read_only_fields = fields


class PayoutCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payoutMethod = serializers.ChoiceField(choices=PayoutRequest.METHOD_CHOICES)
    payoutDetails = serializers.DictField(required=False, default=dict)


class ReviewSerializer(serializers.Serializer):
    adminNotes = serializers.CharField(required=False, allow_blank=True, default="")


class RejectSerializer(ReviewSerializer):
    rejectionReason = serializers.CharField(required=False, allow_blank=True, default="")


class CompleteSerializer(serializers.Serializer):
    externalReference = serializers.CharField(required=False, allow_blank=True, default="", max_length=128)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
