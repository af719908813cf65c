from django.urls import path

from .views import FinancialSettingsView

urlpatterns = [
    path("admin/settings/", FinancialSettingsView.as_view(), name="admin-financial-settings"),
]
