"""
WSGI entry point for the event ticketing payments backend.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "evp_backend.settings.dev")

application = get_wsgi_application()
