"""
Views for the integrations app.

Staff-only diagnostics for the HubSpot connection: a live connection test,
the configured authentication mode and the history of sync runs.
"""
from __future__ import annotations

import logging

from rest_framework import generics, permissions, views
from rest_framework.response import Response

from .hubspot import get_client
from .models import SyncLog
from .serializers import SyncLogSerializer

logger = logging.getLogger(__name__)


class TestConnectionView(views.APIView):
    """Ping the HubSpot API with the configured private-app token."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request):
        ok = get_client().test_connection()
        if ok:
            return Response({"success": True, "message": "Connection successful!"})
        logger.warning("HubSpot connection test failed")
        return Response({"success": False, "message": "Connection failed. Check your credentials."})


class AuthStatusView(views.APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        return Response(get_client().get_auth_status())


class SyncLogListView(generics.ListAPIView):
    """Most recent sync runs, optionally filtered by ``?type=``."""

    serializer_class = SyncLogSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):
        qs = SyncLog.objects.all()
        sync_type = self.request.query_params.get("type")
        if sync_type:
            qs = qs.filter(sync_type=sync_type)
        return qs
