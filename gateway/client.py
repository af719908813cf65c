"""
Pesapal v3 HTTP client.

Two pieces live here:

* ``GatewayAuthClient`` obtains bearer tokens from ``Auth/RequestToken``
  and caches them until 30 seconds before expiry.  Concurrent callers
  share one refresh (double-checked under a lock).
* ``PesapalGateway`` wraps the three calls the payments app needs.  Only
  the transaction status read is retried; submitting an order or
  registering an IPN URL mutates remote state and is never repeated.

Network errors and 5xx answers raise ``GatewayUnavailable``.  Client
errors and malformed bodies raise ``GatewayError``.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from payments.exceptions import AuthError, GatewayError, GatewayUnavailable

logger = logging.getLogger(__name__)

BASE_URLS = {
    "sandbox": "https://cybqa.pesapal.com/pesapalv3/api",
    "live": "https://pay.pesapal.com/v3/api",
}

TOKEN_REFRESH_MARGIN = timedelta(seconds=30)
DEFAULT_TOKEN_LIFETIME = timedelta(minutes=5)
STATUS_RETRY_ATTEMPTS = 3


@dataclass(frozen=True)
class GatewayEndpoints:
    auth: str
    submit_order: str
    register_ipn: str
    transaction_status: str

    @classmethod
    def for_base(cls, base_url: str) -> "GatewayEndpoints":
        base = base_url.rstrip("/")
        return cls(
            auth=f"{base}/Auth/RequestToken",
            submit_order=f"{base}/Transactions/SubmitOrderRequest",
            register_ipn=f"{base}/URLSetup/RegisterIPN",
            transaction_status=f"{base}/Transactions/GetTransactionStatus",
        )


@dataclass
class PesapalConfig:
    consumer_key: str
    consumer_secret: str
    env: str = "sandbox"
    timeout: float = 15.0

    @classmethod
    def from_settings(cls) -> "PesapalConfig":
        key = (getattr(settings, "PESAPAL_CONSUMER_KEY", "") or "").strip()
        secret = (getattr(settings, "PESAPAL_CONSUMER_SECRET", "") or "").strip()
        env = (getattr(settings, "PESAPAL_ENV", "sandbox") or "sandbox").strip().lower()
        if not key or not secret:
            raise AuthError("PESAPAL_CONSUMER_KEY and PESAPAL_CONSUMER_SECRET must be configured")
        if env not in BASE_URLS:
            raise ValueError(f"PESAPAL_ENV must be one of {sorted(BASE_URLS)}, got {env!r}")
        return cls(
            consumer_key=key,
            consumer_secret=secret,
            env=env,
            timeout=float(getattr(settings, "PESAPAL_TIMEOUT", 15)),
        )

    @property
    def endpoints(self) -> GatewayEndpoints:
        return GatewayEndpoints.for_base(BASE_URLS[self.env])


def _parse_expiry(raw, now: datetime) -> datetime:
    """Turn the gateway's ``expiryDate`` into an aware datetime."""
    if raw:
        parsed = parse_datetime(str(raw))
        if parsed is not None:
            if timezone.is_naive(parsed):
                parsed = parsed.replace(tzinfo=dt_timezone.utc)
            return parsed
        logger.warning("Unparseable token expiryDate %r, using default lifetime", raw)
    return now + DEFAULT_TOKEN_LIFETIME


class GatewayAuthClient:
    """Caches a Pesapal bearer token and refreshes it when close to expiry."""

    def __init__(self, config: PesapalConfig, session: requests.Session | None = None, now=None):
        self.config = config
        self.session = session or requests.Session()
        self._now = now or timezone.now
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at: datetime | None = None

    @property
    def endpoints(self) -> GatewayEndpoints:
        return self.config.endpoints

    def _cached_token(self) -> str | None:
        if self._token and self._expires_at and self._expires_at - self._now() > TOKEN_REFRESH_MARGIN:
            return self._token
        return None

    def get_token(self) -> str:
        token = self._cached_token()
        if token:
            return token
        with self._lock:
            # another thread may have refreshed while we waited
            token = self._cached_token()
            if token:
                return token
            return self._refresh()

    def _refresh(self) -> str:
        self._token = None
        self._expires_at = None
        try:
            resp = self.session.post(
                self.endpoints.auth,
                json={
                    "consumer_key": self.config.consumer_key,
                    "consumer_secret": self.config.consumer_secret,
                },
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Pesapal token request failed: %s", exc)
            raise AuthError(details={"reason": str(exc)}) from exc

        if resp.status_code != 200:
            logger.error("Pesapal token request returned HTTP %s: %s", resp.status_code, resp.text[:500])
            raise AuthError(details={"http_status": resp.status_code})
        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthError("Invalid token response from the payment gateway") from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            logger.error("Pesapal token response without token: %s", data)
            raise AuthError("Invalid token response from the payment gateway")

        now = self._now()
        self._token = token
        self._expires_at = _parse_expiry(data.get("expiryDate"), now)
        logger.info("Pesapal token cached, expires at %s", self._expires_at.isoformat())
        return token

    def get_auth_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.get_token()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def clear_token_cache(self) -> None:
        with self._lock:
            self._token = None
            self._expires_at = None
        logger.info("Pesapal token cache cleared")


class PesapalGateway:
    """The subset of the Pesapal API used for ticket sales."""

    def __init__(self, config: PesapalConfig, auth: GatewayAuthClient | None = None,
                 session: requests.Session | None = None, retry_wait=None):
        self.config = config
        self.session = session or requests.Session()
        self.auth = auth or GatewayAuthClient(config, session=self.session)
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4)

    @property
    def endpoints(self) -> GatewayEndpoints:
        return self.config.endpoints

    def _request(self, method: str, url: str, **kwargs) -> dict:
        headers = self.auth.get_auth_headers()
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Pesapal %s %s failed: %s", method, url, exc)
            raise GatewayUnavailable(details={"reason": str(exc)}) from exc

        if resp.status_code >= 500:
            logger.warning("Pesapal %s %s returned HTTP %s", method, url, resp.status_code)
            raise GatewayUnavailable(details={"http_status": resp.status_code})
        if resp.status_code == 401:
            # token revoked early; the next call fetches a fresh one
            self.auth.clear_token_cache()
            raise AuthError(details={"http_status": resp.status_code})
        if resp.status_code >= 400:
            logger.warning("Pesapal %s %s returned HTTP %s: %s", method, url, resp.status_code, resp.text[:500])
            raise GatewayError(details={"http_status": resp.status_code})

        try:
            data = resp.json()
        except ValueError as exc:
            raise GatewayError("Malformed response from the payment gateway") from exc
        if not isinstance(data, dict):
            raise GatewayError("Malformed response from the payment gateway")

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning("Pesapal %s %s returned error body: %s", method, url, error)
            raise GatewayError(message or None, details={"gateway_error": error})
        return data

    def submit_order(self, payload: dict) -> dict:
        data = self._request("POST", self.endpoints.submit_order, json=payload)
        if not data.get("redirect_url") or not data.get("order_tracking_id"):
            raise GatewayError("Invalid order response from the payment gateway", details={"response": data})
        logger.info(
            "Pesapal order submitted: merchant_reference=%s order_tracking_id=%s",
            payload.get("id"), data["order_tracking_id"],
        )
        return data

    def register_ipn(self, url: str, notification_type: str = "POST") -> dict:
        data = self._request(
            "POST",
            self.endpoints.register_ipn,
            json={"url": url, "ipn_notification_type": notification_type},
        )
        if not data.get("ipn_id"):
            raise GatewayError("Invalid IPN registration response", details={"response": data})
        logger.info("Pesapal IPN registered: ipn_id=%s url=%s", data["ipn_id"], url)
        return data

    def get_transaction_status(self, order_tracking_id: str) -> dict:
        retrying = Retrying(
            retry=retry_if_exception_type(GatewayUnavailable),
            stop=stop_after_attempt(STATUS_RETRY_ATTEMPTS),
            wait=self.retry_wait,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                data = self._request(
                    "GET",
                    self.endpoints.transaction_status,
                    params={"orderTrackingId": order_tracking_id},
                )
        logger.debug("Pesapal status for %s: %s", order_tracking_id, data)
        return data


_gateway: PesapalGateway | None = None
_gateway_lock = threading.Lock()


def get_gateway() -> PesapalGateway:
    """Return the lazily created process-wide gateway."""
    global _gateway
    if _gateway is None:
        with _gateway_lock:
            if _gateway is None:
                _gateway = PesapalGateway(PesapalConfig.from_settings())
    return _gateway


def reset_gateway(gateway: PesapalGateway | None = None) -> None:
    """Replace (or drop) the process-wide gateway. Used by tests."""
    global _gateway
    with _gateway_lock:
        _gateway = gateway
