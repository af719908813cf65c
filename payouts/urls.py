from django.urls import path

from .views import (
    AdminPayoutListView,
    ApprovePayoutView,
    CompletePayoutView,
    PayoutCancelView,
    PayoutListView,
    PayoutRequestCreateView,
    ProcessingPayoutView,
    RejectPayoutView,
)

urlpatterns = [
    path("payouts/", PayoutListView.as_view(), name="payout-list"),
    path("payouts/request/", PayoutRequestCreateView.as_view(), name="payout-request"),
    path("payouts/<int:pk>/cancel/", PayoutCancelView.as_view(), name="payout-cancel"),
    path("admin/payouts/", AdminPayoutListView.as_view(), name="admin-payout-list"),
    path("admin/payouts/<int:pk>/approve/", ApprovePayoutView.as_view(), name="admin-payout-approve"),
    path("admin/payouts/<int:pk>/reject/", RejectPayoutView.as_view(), name="admin-payout-reject"),
    path("admin/payouts/<int:pk>/processing/", ProcessingPayoutView.as_view(), name="admin-payout-processing"),
    path("admin/payouts/<int:pk>/complete/", CompletePayoutView.as_view(), name="admin-payout-complete"),
]
