from rest_framework import serializers

from events.models import Event
from users.serializers import UserMiniSerializer
from .models import Ticket


class TicketEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = Event
        fields = ("id", "title", "start_time", "location", "organizer_id")
        read_only_fields = fields


class TicketSerializer(serializers.ModelSerializer):
    event = TicketEventSerializer(read_only=True)
    owner = UserMiniSerializer(read_only=True)

    class Meta:
        model = Ticket
        fields = (
            "id",
            "code",
            "status",
            "price",
            "currency",
            "event",
            "owner",
            "order_tracking_id",
            "qr_code_url",
            "purchased_at",
            "used_at",
            "is_active",
        )
        read_only_fields = fields


class CheckInSerializer(serializers.Serializer):
    ticketCode = serializers.CharField(max_length=64)
