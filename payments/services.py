"""
Gateway order creation and IPN registration.

The order is submitted to the gateway first and a PaymentIntent is only
stored once the gateway has returned a tracking id, so a failed
submission leaves nothing behind locally.
"""
from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from events.models import Event
from gateway.client import get_gateway
from platform_settings import store
from users.models import UserProfile
from .exceptions import GatewayError, OrderError
from .models import PaymentIntent

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    redirect_url: str
    order_tracking_id: str
    merchant_reference: str
    amount: Decimal
    currency: str
    payment_intent: PaymentIntent

    def to_dict(self) -> dict:
        return {
            "redirect_url": self.redirect_url,
            "order_tracking_id": self.order_tracking_id,
            "merchant_reference": self.merchant_reference,
            "amount": self.amount,
            "currency": self.currency,
        }


def generate_merchant_reference() -> str:
    return f"EVP-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def _billing_address(payer) -> dict:
    profile, _ = UserProfile.objects.get_or_create(user=payer)
    first_name, last_name = profile.billing_name()
    return {
        "email_address": payer.email or "",
        "phone_number": profile.phone or "",
        "country_code": settings.GATEWAY_COUNTRY_CODE,
        "first_name": first_name,
        "last_name": last_name,
    }


def create_order(payer, event_id, gateway=None) -> OrderResult:
    event = Event.objects.filter(pk=event_id).first()
    if event is None or not event.is_purchasable:
        raise OrderError("Event not found or not available", code="event_unavailable")
    if event.is_sold_out:
        raise OrderError("Event is sold out", code="sold_out")

    ipn_id = store.get_value(store.PESAPAL_IPN_ID)
    if not ipn_id:
        raise OrderError(
            "Payment setup incomplete. Please contact support.",
            code="setup_required",
            details={"setupRequired": True},
        )

    gateway = gateway or get_gateway()
    merchant_reference = generate_merchant_reference()
    currency = event.currency or settings.GATEWAY_CURRENCY
    payload = {
        "id": merchant_reference,
        "currency": currency,
        "amount": float(event.price),
        "description": f"{event.title} - Ticket Purchase"[:100],
        "callback_url": settings.PESAPAL_CALLBACK_URL,
        "notification_id": ipn_id,
        "redirect_mode": "TOP_WINDOW",
        "billing_address": _billing_address(payer),
    }

    try:
        response = gateway.submit_order(payload)
    except GatewayError as exc:
        logger.warning("Order submission failed for merchant_reference=%s: %s", merchant_reference, exc.message)
        raise OrderError(
            "Failed to create order", code="gateway_error", details={"error": exc.message}
        ) from exc

    intent = PaymentIntent.objects.create(
        payer=payer,
        event=event,
        merchant_reference=merchant_reference,
        order_tracking_id=response["order_tracking_id"],
        amount=event.price,
        currency=currency,
        status=PaymentIntent.STATUS_PENDING,
        gateway_response=response,
    )
    logger.info(
        "Order created: merchant_reference=%s order_tracking_id=%s event=%s payer=%s amount=%s",
        merchant_reference, intent.order_tracking_id, event.pk, payer.pk, event.price,
    )
    return OrderResult(
        redirect_url=response["redirect_url"],
        order_tracking_id=intent.order_tracking_id,
        merchant_reference=merchant_reference,
        amount=intent.amount,
        currency=currency,
        payment_intent=intent,
    )


def register_ipn(url: str, user=None, notification_type: str = "POST", gateway=None) -> dict:
    """Register the IPN listener URL with the gateway and remember its id."""
    if not url.lower().startswith("https://"):
        raise OrderError("IPN URL must use HTTPS", code="invalid_ipn_url")
    gateway = gateway or get_gateway()
    response = gateway.register_ipn(url, notification_type)
    ipn_id = response["ipn_id"]
    store.set_value(store.PESAPAL_IPN_ID, ipn_id, "Pesapal IPN notification ID", updated_by=user)
    store.set_value(store.PESAPAL_IPN_URL, url, "Pesapal IPN notification URL", updated_by=user)
    logger.info("IPN registered: ipn_id=%s url=%s by user=%s", ipn_id, url, getattr(user, "pk", None))
    return {"ipn_id": ipn_id, "url": url}
