from django.conf import settings
from django.shortcuts import redirect


def index(request):
    # The API has no HTML pages of its own; send browsers to the SPA
    return redirect(settings.FRONTEND_URL)
