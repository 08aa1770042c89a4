"""
Authentication and account endpoints.

Login is by email + password and returns SimpleJWT tokens; registration
logs the new customer straight in.  Creating the HubSpot contact happens in
the background (see ``users.signals``).
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from common.throttling import ActionRateThrottle

from .customers import CustomerSyncError, get_contact_id, manual_sync_user
from .serializers import EmailTokenObtainPairSerializer, MeSerializer, RegisterSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [ActionRateThrottle]
    throttle_scope = "login"

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered customer %s", user.pk)

        refresh = RefreshToken.for_user(user)
        payload = serializer.data
        payload.update({"access": str(refresh.access_token), "refresh": str(refresh)})
        return Response(payload, status=status.HTTP_201_CREATED)


class EmailTokenObtainPairView(TokenObtainPairView):
    """Obtain JWT tokens using email + password."""

    permission_classes = [permissions.AllowAny]
    serializer_class = EmailTokenObtainPairSerializer
    throttle_classes = [ActionRateThrottle]
    throttle_scope = "login"


class MeView(generics.RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MeSerializer
    http_method_names = ["get", "patch", "head", "options"]

    def get_object(self):
        return self.request.user


class CustomerSyncView(APIView):
    """Staff-triggered contact create/update for one user."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request, user_id):
        try:
            contact_id = manual_sync_user(user_id)
        except CustomerSyncError as exc:
            return Response({"detail": exc.message, "code": exc.code}, status=status.HTTP_404_NOT_FOUND)

        if not contact_id:
            return Response(
                {"success": False, "message": "HubSpot sync failed, see logs"},
                status=status.HTTP_502_BAD_GATEWAY,
            )
        return Response({"success": True, "contact_id": contact_id})


class CustomerSyncStatusView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request, user_id):
        user = generics.get_object_or_404(get_user_model(), pk=user_id)
        contact_id = get_contact_id(user)
        return Response({"user_id": user.pk, "synced": bool(contact_id), "contact_id": contact_id})
