"""
URL configuration for the integrations app.

Include this module under ``/api/integrations/`` at the project level.
"""
from django.urls import path

from .views import AuthStatusView, SyncLogListView, TestConnectionView

urlpatterns = [
    path("test-connection/", TestConnectionView.as_view(), name="integration-test-connection"),
    path("auth-status/", AuthStatusView.as_view(), name="integration-auth-status"),
    path("sync-logs/", SyncLogListView.as_view(), name="integration-sync-logs"),
]
