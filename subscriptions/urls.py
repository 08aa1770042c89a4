from django.urls import path

from .views import (
    CheckoutSubscriptionTypesView,
    CommerceSubscriptionsView,
    EmailPreferencesView,
    SyncSubscriptionTypesView,
)

urlpatterns = [
    path("types/checkout/", CheckoutSubscriptionTypesView.as_view(), name="subscription-types-checkout"),
    path("types/sync/", SyncSubscriptionTypesView.as_view(), name="subscription-types-sync"),
    path("preferences/", EmailPreferencesView.as_view(), name="email-preferences"),
    path("mine/", CommerceSubscriptionsView.as_view(), name="commerce-subscriptions"),
]
