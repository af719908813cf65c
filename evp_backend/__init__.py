"""
Package initializer for the event ticketing payments backend.

The Celery application is imported here so that shared tasks use
`evp_backend.celery_app` by default, avoiding duplicate worker setups.
"""
from .celery import celery_app  # noqa: F401

__all__ = ["celery_app"]
