"""
Read/write helpers for platform settings.

``get_value`` never raises for a missing key; it returns the caller's
default.  ``set_value`` is an upsert and marks the row as a system
setting so it cannot be removed from the admin.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from .models import Setting

logger = logging.getLogger(__name__)

PESAPAL_IPN_ID = "pesapal_ipn_id"
PESAPAL_IPN_URL = "pesapal_ipn_url"
ADMIN_COMMISSION_PERCENTAGE = "admin_commission_percentage"
MINIMUM_PAYOUT_AMOUNT = "minimum_payout_amount"
ORGANIZATION_DEPOSIT_AMOUNT = "organization_deposit_amount"

SYSTEM_KEYS = (
    PESAPAL_IPN_ID,
    PESAPAL_IPN_URL,
    ADMIN_COMMISSION_PERCENTAGE,
    MINIMUM_PAYOUT_AMOUNT,
    ORGANIZATION_DEPOSIT_AMOUNT,
)

DEFAULTS = {
    ADMIN_COMMISSION_PERCENTAGE: Decimal("10"),
    MINIMUM_PAYOUT_AMOUNT: Decimal("1000"),
    ORGANIZATION_DEPOSIT_AMOUNT: Decimal("5000"),
}


def get_value(key: str, default=None):
    row = Setting.objects.filter(key=key).values_list("value", flat=True).first()
    return default if row is None else row


def get_decimal(key: str, default=None) -> Decimal:
    """Numeric settings; falls back to ``default`` or the built-in default."""
    if default is None:
        default = DEFAULTS.get(key, Decimal("0"))
    raw = get_value(key, None)
    if raw is None or raw == "":
        return Decimal(str(default))
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError):
        logger.warning("Setting %s holds non-numeric value %r, using default %s", key, raw, default)
        return Decimal(str(default))


def set_value(key: str, value, description: str = "", updated_by=None) -> Setting:
    setting, created = Setting.objects.update_or_create(
        key=key,
        defaults={
            "value": value,
            "description": description,
            "updated_by": updated_by,
            "is_system": True,
        },
    )
    logger.info(
        "Setting %s %s by user=%s",
        key,
        "created" if created else "updated",
        getattr(updated_by, "pk", None),
    )
    return setting
