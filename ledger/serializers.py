from rest_framework import serializers

from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source="event.title", read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = (
            "id",
            "type",
            "user",
            "event",
            "event_title",
            "payment_intent",
            "amount",
            "currency",
            "status",
            "description",
            "related_transaction",
            "metadata",
            "created_at",
        )
        read_only_fields = fields
