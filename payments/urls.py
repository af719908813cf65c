"""
URL configuration for the payments app.

Include this module under ``/api/payments/`` in the project-level URL
config.  The ``ipn/`` route is the URL registered with the gateway.
"""
from django.urls import path

from .views import CallbackView, CreateOrderView, IPNRegisterView, IPNView, VerifyPaymentView

urlpatterns = [
    path("orders/", CreateOrderView.as_view(), name="payment-order-create"),
    path("ipn/", IPNView.as_view(), name="payment-ipn"),
    path("ipn/register/", IPNRegisterView.as_view(), name="payment-ipn-register"),
    path("callback/", CallbackView.as_view(), name="payment-callback"),
    path("verify/", VerifyPaymentView.as_view(), name="payment-verify"),
]
