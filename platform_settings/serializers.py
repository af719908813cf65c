from decimal import Decimal

from rest_framework import serializers


class FinancialSettingsSerializer(serializers.Serializer):
    adminCommissionPercentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, coerce_to_string=False
    )
    minimumPayoutAmount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, coerce_to_string=False
    )
    organizationDepositAmount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, coerce_to_string=False
    )

    def validate_adminCommissionPercentage(self, value):
        if value < 0 or value > 50:
            raise serializers.ValidationError("Commission percentage must be between 0 and 50")
        return value

    def validate_minimumPayoutAmount(self, value):
        if value < Decimal("0"):
            raise serializers.ValidationError("Minimum payout amount cannot be negative")
        return value

    def validate_organizationDepositAmount(self, value):
        if value < Decimal("0"):
            raise serializers.ValidationError("Organization deposit amount cannot be negative")
        return value
