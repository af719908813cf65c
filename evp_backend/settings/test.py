"""
Test settings for the event ticketing payments backend.

SQLite in memory, local-memory cache, eager Celery and no throttling so the
pytest suite runs without PostgreSQL or Redis.
"""
from .base import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": [],
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

PESAPAL_CONSUMER_KEY = "test-key"
PESAPAL_CONSUMER_SECRET = "test-secret"
PESAPAL_ENV = "sandbox"
PESAPAL_CALLBACK_URL = "https://tickets.example.com/payment/callback"
