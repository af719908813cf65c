"""
Request serializers for the payments endpoints.

Field names follow the gateway's own casing (``OrderTrackingId`` etc.)
where the gateway or the hosted checkout page produces the request.
"""
from rest_framework import serializers


class CreateOrderSerializer(serializers.Serializer):
    eventId = serializers.IntegerField(min_value=1)


class IPNNotificationSerializer(serializers.Serializer):
    OrderTrackingId = serializers.CharField(max_length=128)
    OrderMerchantReference = serializers.CharField(max_length=64)
    OrderNotificationType = serializers.CharField(max_length=32)


class IPNRegisterSerializer(serializers.Serializer):
    url = serializers.URLField()
    ipn_notification_type = serializers.ChoiceField(choices=["GET", "POST"], default="POST")


class CallbackSerializer(serializers.Serializer):
    OrderTrackingId = serializers.CharField(max_length=128)
    OrderMerchantReference = serializers.CharField(max_length=64, required=False, allow_blank=True)


class VerifyQuerySerializer(serializers.Serializer):
    orderTrackingId = serializers.CharField(max_length=128)

