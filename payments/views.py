"""
Views for the payments app.

The HubSpot payment webhook is the only endpoint.  It takes no
authentication and relies solely on signature verification.
"""
from __future__ import annotations

import json
import logging

from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status, views
from rest_framework.response import Response

from .tasks import process_webhook_events
from .webhooks import normalize_payload, verify_signature

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class HubSpotPaymentWebhookView(views.APIView):
    """Handle incoming HubSpot invoice and commerce payment events."""

    authentication_classes = []
    permission_classes = []  # no authentication

    def post(self, request):
        body = request.body
        signature = request.META.get("HTTP_X_HUBSPOT_SIGNATURE", "")
        if not verify_signature(body, signature):
            return Response(
                {"success": False, "message": "Invalid signature"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        try:
            payload = json.loads(body or b"null")
        except ValueError:
            payload = None
        events = normalize_payload(payload)
        if not events:
            return Response(
                {"success": False, "message": "Invalid payload"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        process_webhook_events.delay(events)
        return Response({"success": True, "message": "Webhook processed"}, status=status.HTTP_200_OK)
