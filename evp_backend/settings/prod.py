"""
Production settings for the event ticketing payments backend.

Extends the base settings by disabling debug mode, enforcing secure
cookies, enabling HTTP Strict Transport Security and pointing the payment
gateway at the live environment.
"""
from .base import *  # noqa

DEBUG = False

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_SSL_REDIRECT = True

SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

# Real money: default to the live gateway unless explicitly overridden
PESAPAL_ENV = os.getenv("PESAPAL_ENV", "live")  # noqa: F405
DATABASES["default"]["CONN_HEALTH_CHECKS"] = True  # noqa: F405
