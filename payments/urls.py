"""
URL configuration for the payments app.

Include this module under ``/api/webhooks/`` in the project-level URL
config; HubSpot is pointed at ``/api/webhooks/payment/``.
"""
from django.urls import path

from .views import HubSpotPaymentWebhookView

urlpatterns = [
    path("payment/", HubSpotPaymentWebhookView.as_view(), name="hubspot-payment-webhook"),
]
