"""
Payout endpoints for organizers (request, list, cancel) and admins
(list and review).
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsOrganizer, IsPlatformAdmin
from . import services
from .exceptions import PayoutError
from .models import PayoutRequest
from .serializers import (
    CompleteSerializer,
    PayoutCreateSerializer,
    PayoutRequestSerializer,
    RejectSerializer,
    ReviewSerializer,
)

logger = logging.getLogger(__name__)


def _error(exc: PayoutError) -> Response:
    return Response(exc.to_dict(), status=exc.status_code)


class PayoutRequestCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizer]

    def post(self, request):
        serializer = PayoutCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            payout = services.request_payout(
                request.user, data["amount"], data["payoutMethod"], data.get("payoutDetails")
            )
        except PayoutError as exc:
            return _error(exc)
        return Response(
            {"message": "Payout request submitted successfully", "payoutRequest": PayoutRequestSerializer(payout).data},
            status=status.HTTP_201_CREATED,
        )


class PayoutListView(generics.ListAPIView):
    serializer_class = PayoutRequestSerializer
    permission_classes = [permissions.IsAuthenticated, IsOrganizer]

    def get_queryset(self):
        qs = PayoutRequest.objects.filter(requester=self.request.user).select_related("requester__profile")
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-requested_at")


class PayoutCancelView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizer]

    def patch(self, request, pk):
        payout = get_object_or_404(PayoutRequest, pk=pk, requester=request.user)
        try:
            payout = services.cancel(payout, request.user)
        except PayoutError as exc:
            return _error(exc)
        return Response({"message": "Payout request cancelled successfully", "payout": PayoutRequestSerializer(payout).data})


class AdminPayoutListView(generics.ListAPIView):
    serializer_class = PayoutRequestSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]

    def get_queryset(self):
        qs = PayoutRequest.objects.select_related("requester__profile", "reviewed_by")
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-requested_at")


class AdminPayoutActionView(APIView):
    """Base for the admin review actions; subclasses implement ``perform``."""

    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    input_serializer = ReviewSerializer
    success_message = ""

    def perform(self, payout, reviewer, data):
        raise NotImplementedError

    def patch(self, request, pk):
        payout = get_object_or_404(PayoutRequest, pk=pk)
        serializer = self.input_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payout = self.perform(payout, request.user, serializer.validated_data)
        except PayoutError as exc:
            logger.info("Payout %s action refused for user=%s: %s", pk, request.user.pk, exc.message)
            return _error(exc)
        body = {"message": self.success_message, "payout": PayoutRequestSerializer(payout).data}
        if payout.transaction_id:
            body["transactionId"] = payout.transaction_id
        return Response(body)


class ApprovePayoutView(AdminPayoutActionView):
    success_message = "Payout request approved successfully"

    def perform(self, payout, reviewer, data):
        return services.approve(payout, reviewer, data.get("adminNotes", ""))


class RejectPayoutView(AdminPayoutActionView):
    input_serializer = RejectSerializer
    success_message = "Payout request rejected successfully"

    def perform(self, payout, reviewer, data):
        return services.reject(payout, reviewer, data.get("rejectionReason", ""), data.get("adminNotes", ""))


class ProcessingPayoutView(AdminPayoutActionView):
    success_message = "Payout request marked as processing"

    def perform(self, payout, reviewer, data):
        return services.mark_processing(payout, reviewer)


class CompletePayoutView(AdminPayoutActionView):
    input_serializer = CompleteSerializer
    success_message = "Payout completed successfully"

    def perform(self, payout, reviewer, data):
        return services.complete(payout, reviewer, data.get("externalReference", ""), data.get("notes", ""))
