"""
Views for the payments app.

This module exposes the order endpoint used by the checkout page, the
two reconciliation channels (the gateway's IPN push and the client's
callback pull), payment verification and the admin-only IPN
registration.  The IPN endpoint is public and unauthenticated: it only
acknowledges and enqueues, and the status it acts on is always fetched
from the gateway itself.
"""
from __future__ import annotations

import logging

from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from kombu.exceptions import OperationalError
from rest_framework import permissions, status, views
from rest_framework.response import Response

from common.permissions import IsPlatformAdmin
from tickets.models import Ticket
from .exceptions import PaymentsError
from .models import PaymentIntent
from .reconciliation import CHANNEL_CALLBACK, reconcile
from .serializers import (
    CallbackSerializer,
    CreateOrderSerializer,
    IPNNotificationSerializer,
    IPNRegisterSerializer,
    VerifyQuerySerializer,
)
from .services import create_order, register_ipn
from .tasks import reconcile_ipn_notification

logger = logging.getLogger(__name__)


def _error_response(exc: PaymentsError) -> Response:
    return Response(exc.to_dict(), status=exc.status_code)


class CreateOrderView(views.APIView):
    """Submit a ticket order to the gateway and return its redirect URL."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = create_order(request.user, serializer.validated_data["eventId"])
        except PaymentsError as exc:
            return _error_response(exc)
        return Response(result.to_dict())


@method_decorator(csrf_exempt, name="dispatch")
class IPNView(views.APIView):
    """Receive an instant payment notification from the gateway."""

    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    # every IPN comes from a handful of gateway addresses
    throttle_classes = []

    def _handle(self, data):
        serializer = IPNNotificationSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        tracking_id = serializer.validated_data["OrderTrackingId"]
        notification_type = serializer.validated_data["OrderNotificationType"]
        merchant_reference = serializer.validated_data["OrderMerchantReference"]
        logger.info(
            "IPN received: order_tracking_id=%s merchant_reference=%s type=%s",
            tracking_id, merchant_reference, notification_type,
        )
        try:
            reconcile_ipn_notification.delay(tracking_id, notification_type, dict(data.items()))
        except OperationalError as exc:
            logger.error("Could not enqueue IPN for order_tracking_id=%s: %s", tracking_id, exc)
            return Response({"message": "IPN processing failed"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(
            {
                "orderNotificationType": notification_type,
                "orderTrackingId": tracking_id,
                "orderMerchantReference": merchant_reference,
                "status": 200,
            }
        )

    def post(self, request):
        return self._handle(request.data)

    def get(self, request):
        return self._handle(request.query_params)


class IPNRegisterView(views.APIView):
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]

    def post(self, request):
        serializer = IPNRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            data = register_ipn(
                serializer.validated_data["url"],
                user=request.user,
                notification_type=serializer.validated_data["ipn_notification_type"],
            )
        except PaymentsError as exc:
            return _error_response(exc)
        return Response({"message": "IPN registered successfully", **data})


class CallbackView(views.APIView):
    """Client-driven reconciliation after the gateway redirects back."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CallbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tracking_id = serializer.validated_data["OrderTrackingId"]
        try:
            result = reconcile(
                tracking_id,
                channel=CHANNEL_CALLBACK,
                notification_type="CALLBACK",
                payload=dict(serializer.validated_data),
            )
        except PaymentsError as exc:
            logger.warning("Callback reconciliation failed for order_tracking_id=%s: %s", tracking_id, exc.message)
            return _error_response(exc)

        intent = result.payment_intent
        return Response(
            {
                "message": f"Payment {result.status.lower()}",
                "status": result.status,
                "orderTrackingId": tracking_id,
                "merchantReference": intent.merchant_reference,
                "paymentStatusDescription": intent.status_description,
                "confirmationCode": intent.confirmation_code,
            }
        )


class VerifyPaymentView(views.APIView):
    """Report the locally reconciled state of a payment and its ticket."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        serializer = VerifyQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        tracking_id = serializer.validated_data["orderTrackingId"]

        intent = PaymentIntent.objects.filter(order_tracking_id=tracking_id).first()
        if intent is None:
            return Response({"valid": False, "message": "Payment not found"}, status=status.HTTP_404_NOT_FOUND)
        ticket = Ticket.objects.filter(order_tracking_id=tracking_id).first()
        valid = (
            intent.status == PaymentIntent.STATUS_COMPLETED
            and ticket is not None
            and ticket.is_valid
        )
        return Response(
            {
                "valid": valid,
                "payment_status": intent.status,
                "ticket_status": ticket.status if ticket else "not_found",
                "payment_status_description": intent.status_description,
                "confirmation_code": intent.confirmation_code,
            }
        )
