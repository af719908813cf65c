"""
ASGI entry point for the event ticketing payments backend.

The default settings module is the development configuration; production
deployments set DJANGO_SETTINGS_MODULE explicitly.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "evp_backend.settings.dev")

application = get_asgi_application()
