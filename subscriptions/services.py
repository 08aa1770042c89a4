"""
Email subscription and commerce subscription services.

Wraps HubSpot's communication-preferences v4 API (subscription type
definitions, per-contact statuses, subscribe/unsubscribe) and the commerce
subscriptions object associated to a customer's contact.
"""
from __future__ import annotations

import logging

from django.db import transaction

from common.features import can_use_subscriptions
from integrations.hubspot import HubSpotAPIError, get_client
from integrations.models import SyncLog
from users.customers import get_contact_id

from .models import EmailSubscriptionType
from .signals import subscription_types_synced

logger = logging.getLogger(__name__)

CHECKOUT_EXPLANATION = "Subscribed during checkout"
DASHBOARD_EXPLANATION = "Updated from account dashboard"


class SubscriptionError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def ensure_enabled():
    if not can_use_subscriptions():
        raise SubscriptionError("not_licensed", "Subscriptions require a Pro licence")


def sync_subscription_types(client=None) -> list[EmailSubscriptionType]:
    """Mirror HubSpot subscription definitions; types gone from HubSpot become inactive."""
    ensure_enabled()
    client = client or get_client()
    try:
        response = client.get_subscription_type_definitions()
    except HubSpotAPIError as exc:
        SyncLog.record(SyncLog.TYPE_SUBSCRIPTION_TYPES, errors=[exc.message])
        raise SubscriptionError("hubspot_error", exc.message) from exc

    definitions = response.get("subscriptionDefinitions")
    if not isinstance(definitions, list):
        SyncLog.record(SyncLog.TYPE_SUBSCRIPTION_TYPES, errors=["No subscription types found"])
        raise SubscriptionError("no_subscription_types", "No subscription types found")

    synced = []
    with transaction.atomic():
        for definition in definitions:
            if not definition.get("id"):
                continue
            obj, _ = EmailSubscriptionType.objects.update_or_create(
                hubspot_id=str(definition["id"]),
                defaults={
                    "name": definition.get("name") or "",
                    "description": definition.get("description") or "",
                    "purpose": definition.get("purpose") or "",
                    "is_active": bool(definition.get("isActive", True)),
                    "is_default": bool(definition.get("isDefault", False)),
                },
            )
            synced.append(obj)
        EmailSubscriptionType.objects.exclude(
            hubspot_id__in=[t.hubspot_id for t in synced]
        ).update(is_active=False)

    SyncLog.record(SyncLog.TYPE_SUBSCRIPTION_TYPES, synced=len(synced), summary=f"{len(synced)} types")
    subscription_types_synced.send(sender=EmailSubscriptionType, types=synced)
    return synced


def get_checkout_subscription_types():
    flagged = EmailSubscriptionType.objects.filter(show_on_checkout=True)
    if not flagged.exists():
        return EmailSubscriptionType.objects.filter(is_active=True, is_default=False)
    return flagged.filter(is_active=True)


def subscribe_contact_to_types(email: str, subscription_ids, legal_basis: str = "CONSENT", client=None) -> dict:
    """Opt ``email`` into each type; returns ``{id: {"success": bool, "error"?: str}}``."""
    client = client or get_client()
    results = {}
    for subscription_id in subscription_ids:
        try:
            client.subscribe_contact(email, subscription_id, legal_basis, CHECKOUT_EXPLANATION)
        except HubSpotAPIError as exc:
            logger.warning("Failed to subscribe %s to %s: %s", email, subscription_id, exc.message)
            results[subscription_id] = {"success": False, "error": exc.message}
        else:
            results[subscription_id] = {"success": True}
    return results


def get_contact_statuses(email: str, client=None) -> dict:
    ensure_enabled()
    client = client or get_client()
    try:
        return client.get_contact_subscription_statuses(email)
    except HubSpotAPIError as exc:
        raise SubscriptionError("hubspot_error", exc.message) from exc


def update_email_subscriptions(email: str, subscribe=(), unsubscribe=(), client=None) -> dict:
    ensure_enabled()
    client = client or get_client()
    results = {"subscribed": [], "unsubscribed": [], "errors": []}

    for subscription_id in subscribe:
        try:
            client.subscribe_contact(email, subscription_id, "CONSENT", DASHBOARD_EXPLANATION)
        except HubSpotAPIError as exc:
            results["errors"].append(exc.message)
        else:
            results["subscribed"].append(subscription_id)

    for subscription_id in unsubscribe:
        try:
            client.unsubscribe_contact(email, subscription_id)
        except HubSpotAPIError as exc:
            results["errors"].append(exc.message)
        else:
            results["unsubscribed"].append(subscription_id)

    return results


def get_customer_subscriptions(user, client=None) -> list[dict]:
    """Commerce subscriptions associated to the user's HubSpot contact."""
    ensure_enabled()
    contact_id = get_contact_id(user)
    if not contact_id:
        return []

    client = client or get_client()
    try:
        associations = client.get_contact_subscriptions(contact_id)
    except HubSpotAPIError as exc:
        raise SubscriptionError("hubspot_error", exc.message) from exc

    subscriptions = []
    for assoc in associations.get("results") or []:
        subscription_id = assoc.get("id") or assoc.get("toObjectId")
        if not subscription_id:
            continue
        try:
            record = client.get_commerce_subscription(str(subscription_id))
        except HubSpotAPIError as exc:
            logger.warning("Could not load subscription %s: %s", subscription_id, exc.message)
            continue
        subscriptions.append({"id": str(record.get("id") or subscription_id), "properties": record.get("properties") or {}})
    return subscriptions
