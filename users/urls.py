"""
Authentication and account routes, mounted under ``/api/auth/``.
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    CustomerSyncStatusView,
    CustomerSyncView,
    EmailTokenObtainPairView,
    MeView,
    RegisterView,
)

urlpatterns = [
    path("token/", EmailTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("register/", RegisterView.as_view(), name="register"),
    path("me/", MeView.as_view(), name="me"),
    path("customers/<int:user_id>/sync/", CustomerSyncView.as_view(), name="customer-sync"),
    path("customers/<int:user_id>/", CustomerSyncStatusView.as_view(), name="customer-sync-status"),
]
