"""
Financial reporting endpoints: the organizer dashboard and the admin
overview.  Both are read-only views over the ledger and payout tables.
"""
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsOrganizer, IsPlatformAdmin
from payouts.serializers import PayoutRequestSerializer
from .serializers import TransactionSerializer
from .services import admin_overview, organizer_dashboard


class FinancialDashboardView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsOrganizer]

    def get(self, request):
        data = organizer_dashboard(request.user)
        return Response(
            {
                "balances": data["balances"],
                "earningsBreakdown": data["earningsBreakdown"],
                "recentTransactions": TransactionSerializer(data["recentTransactions"], many=True).data,
                "pendingPayouts": PayoutRequestSerializer(data["pendingPayouts"], many=True).data,
            }
        )


class AdminFinancialOverviewView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]

    def get(self, request):
        data = admin_overview()
        return Response(
            {
                "stats": data["stats"],
                "pendingPayouts": PayoutRequestSerializer(data["pendingPayouts"], many=True).data,
                "recentTransactions": TransactionSerializer(data["recentTransactions"], many=True).data,
            }
        )
