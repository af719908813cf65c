"""
Admin endpoint for the financial settings.

``GET`` returns the effective values (stored or default); ``PATCH``
updates any subset of them.
"""
import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsPlatformAdmin
from . import store
from .serializers import FinancialSettingsSerializer

logger = logging.getLogger(__name__)

FIELD_KEYS = {
    "adminCommissionPercentage": (store.ADMIN_COMMISSION_PERCENTAGE, "Admin commission percentage"),
    "minimumPayoutAmount": (store.MINIMUM_PAYOUT_AMOUNT, "Minimum payout amount"),
    "organizationDepositAmount": (store.ORGANIZATION_DEPOSIT_AMOUNT, "Organization registration deposit amount"),
}


class FinancialSettingsView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    serializer_class = FinancialSettingsSerializer

    def get(self, request):
        data = {field: store.get_decimal(key) for field, (key, _) in FIELD_KEYS.items()}
        return Response(FinancialSettingsSerializer(data).data)

    def patch(self, request):
        serializer = FinancialSettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        updated = {}
        for field, value in serializer.validated_data.items():
            key, description = FIELD_KEYS[field]
            store.set_value(key, value, description, updated_by=request.user)
            updated[field] = value
        logger.info("Financial settings updated by user=%s: %s", request.user.pk, sorted(updated))
        return Response(
            {
                "message": "Financial settings updated successfully",
                "updatedSettings": FinancialSettingsSerializer(updated).data,
            },
            status=status.HTTP_200_OK,
        )
