"""
URL configuration for the event ticketing payments backend.

All API endpoints live under the `/api/` prefix.  JWT tokens are issued
by simplejwt at `/api/token/`; the OpenAPI schema and Swagger UI are
served by drf-spectacular.
"""
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from evp_backend.views import index

urlpatterns = [
    path("", index, name="index"),
    path("admin/", admin.site.urls),

    path("api/", RedirectView.as_view(pattern_name="swagger-ui", permanent=False)),

    #  Swagger/Redoc
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    path("api/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/token/verify/", TokenVerifyView.as_view(), name="token_verify"),

    path("api/payments/", include("payments.urls")),
    path("api/tickets/", include("tickets.urls")),
    path("api/", include("ledger.urls")),
    path("api/", include("payouts.urls")),
    path("api/", include("platform_settings.urls")),
]
