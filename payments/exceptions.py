"""
Domain exceptions for gateway orders and payment reconciliation.

Every error carries a machine readable ``code``, a human readable
``message`` and an optional ``details`` dict.  Views turn them into DRF
responses via ``to_dict()`` using ``status_code`` as the HTTP status.
"""
from __future__ import annotations


class PaymentsError(Exception):
    code = "payments_error"
    status_code = 500
    default_message = "Payment processing failed"

    def __init__(self, message: str | None = None, *, code: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        data = {"message": self.message, "code": self.code}
        if self.details:
            data.update(self.details)
        return data


class AuthError(PaymentsError):
    """The gateway refused or failed to issue an access token."""
    code = "gateway_auth_failed"
    status_code = 502
    default_message = "Failed to authenticate with the payment gateway"


class GatewayError(PaymentsError):
    """The gateway answered, but with a client error or a malformed body."""
    code = "gateway_error"
    status_code = 502
    default_message = "Payment gateway rejected the request"


class GatewayUnavailable(GatewayError):
    """Network failure, timeout or 5xx from the gateway. Safe to retry reads."""
    code = "gateway_unavailable"
    status_code = 503
    default_message = "Payment gateway is temporarily unavailable"


class OrderError(PaymentsError):
    code = "order_error"
    status_code = 400
    default_message = "Failed to create order"

    STATUS_BY_CODE = {
        "event_unavailable": 404,
        "sold_out": 400,
        "setup_required": 400,
        "gateway_error": 502,
    }

    def __init__(self, message=None, *, code=None, details=None):
        super().__init__(message, code=code, details=details)
        self.status_code = self.STATUS_BY_CODE.get(self.code, 400)


class ReconciliationNotFound(PaymentsError):
    code = "payment_not_found"
    status_code = 404
    default_message = "Payment intent not found"


class IssueError(PaymentsError):
    """Ticket issuance failed; the payment intent stays PENDING."""
    code = "ticket_issue_failed"
    default_message = "Failed to issue ticket for payment"


class LedgerError(PaymentsError):
    """Ledger split failed; the payment intent stays PENDING."""
    code = "ledger_failed"
    default_message = "Failed to record payment in the ledger"
