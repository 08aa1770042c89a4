"""
Views for the subscriptions app.

Every endpoint answers 403 when the store tier does not include
subscriptions.  Customers manage the preferences of their own email;
staff may pass another one.
"""
from __future__ import annotations

from rest_framework import permissions, status, views
from rest_framework.response import Response

from common.features import can_use_subscriptions

from .serializers import EmailSubscriptionTypeSerializer, PreferencesUpdateSerializer
from .services import (
    SubscriptionError,
    get_checkout_subscription_types,
    get_contact_statuses,
    get_customer_subscriptions,
    sync_subscription_types,
    update_email_subscriptions,
)


class SubscriptionsEnabled(permissions.BasePermission):
    message = "Subscriptions require a Pro licence"

    def has_permission(self, request, view):
        return can_use_subscriptions()


def error_response(exc: SubscriptionError):
    http_status = status.HTTP_502_BAD_GATEWAY if exc.code == "hubspot_error" else status.HTTP_400_BAD_REQUEST
    return Response({"detail": exc.message, "code": exc.code}, status=http_status)


def target_email(request, requested):
    """Staff may act on any email; everyone else only on their own."""
    if requested and (request.user.is_staff or request.user.is_superuser):
        return requested
    return request.user.email


class CheckoutSubscriptionTypesView(views.APIView):
    permission_classes = [SubscriptionsEnabled]

    def get(self, request):
        types = get_checkout_subscription_types()
        return Response(EmailSubscriptionTypeSerializer(types, many=True).data)


class SyncSubscriptionTypesView(views.APIView):
    permission_classes = [permissions.IsAdminUser, SubscriptionsEnabled]

    def post(self, request):
        try:
            types = sync_subscription_types()
        except SubscriptionError as exc:
            return error_response(exc)
        return Response({"count": len(types), "types": EmailSubscriptionTypeSerializer(types, many=True).data})


class EmailPreferencesView(views.APIView):
    permission_classes = [permissions.IsAuthenticated, SubscriptionsEnabled]

    def get(self, request):
        email = target_email(request, request.query_params.get("email"))
        try:
            statuses = get_contact_statuses(email)
        except SubscriptionError as exc:
            return error_response(exc)
        return Response(statuses)

    def post(self, request):
        ser = PreferencesUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        email = target_email(request, ser.validated_data.get("email"))
        results = update_email_subscriptions(
            email, ser.validated_data["subscribe"], ser.validated_data["unsubscribe"]
        )
        if results["errors"]:
            return Response(
                {"success": False, "message": "Some subscriptions could not be updated", "details": results},
                status=status.HTTP_207_MULTI_STATUS,
            )
        return Response(
            {"success": True, "message": "Subscription preferences updated successfully", "details": results}
        )


class CommerceSubscriptionsView(views.APIView):
    permission_classes = [permissions.IsAuthenticated, SubscriptionsEnabled]

    def get(self, request):
        try:
            subscriptions = get_customer_subscriptions(request.user)
        except SubscriptionError as exc:
            return error_response(exc)
        return Response(subscriptions)
