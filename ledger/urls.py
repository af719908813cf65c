from django.urls import path

from .views import AdminFinancialOverviewView, FinancialDashboardView

urlpatterns = [
    path("financial/dashboard/", FinancialDashboardView.as_view(), name="financial-dashboard"),
    path("admin/financial/overview/", AdminFinancialOverviewView.as_view(), name="admin-financial-overview"),
]
