"""
Keeps Django users and HubSpot contacts in step.

A new user becomes a HubSpot contact (first and last name only); later
profile saves push the names plus whichever billing fields are filled in.
HubSpot failures are logged and never bubble up to registration or profile
editing.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.utils import timezone

from integrations.hubspot import HubSpotAPIError, get_client
from orders.models import Order

from .models import CustomerProfile
from .signals import customer_synced, customer_updated

logger = logging.getLogger(__name__)

# HubSpot contact property -> CustomerProfile field
BILLING_PROPERTIES = {
    "phone": "billing_phone",
    "address": "billing_address_1",
    "city": "billing_city",
    "state": "billing_state",
    "zip": "billing_postcode",
    "country": "billing_country",
}


class CustomerSyncError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def get_profile(user) -> CustomerProfile:
    profile, _ = CustomerProfile.objects.get_or_create(user=user)
    return profile


def get_contact_id(user) -> str:
    if user is None or not user.pk:
        return ""
    contact_id = (
        CustomerProfile.objects.filter(user=user).values_list("hubspot_contact_id", flat=True).first()
    )
    return contact_id or ""


def is_user_synced(user) -> bool:
    return bool(get_contact_id(user))


def contact_properties(user, include_billing: bool = False) -> dict:
    properties = {
        "firstname": user.first_name or "",
        "lastname": user.last_name or "",
    }
    if include_billing:
        profile = get_profile(user)
        for prop, field in BILLING_PROPERTIES.items():
            value = (getattr(profile, field) or "").strip()
            if value:
                properties[prop] = value
    return properties


def _store_contact_id(user, contact_id: str):
    get_profile(user)
    CustomerProfile.objects.filter(user=user).update(hubspot_contact_id=contact_id, synced_at=timezone.now())


def _existing_contact_id(client, email: str) -> str:
    found = client.search_contact_by_email(email)
    results = found.get("results") or []
    if results and results[0].get("id"):
        return str(results[0]["id"])
    return ""


def sync_new_user(user, client=None) -> str | None:
    """Create the HubSpot contact for ``user``; returns the contact id or None."""
    existing = get_contact_id(user)
    if existing:
        return existing
    if not user.email:
        logger.info("User %s has no email, skipping HubSpot contact", user.pk)
        return None

    try:
        client = client or get_client()
        result = client.create_contact(user.email, contact_properties(user))
        contact_id = str(result["id"])
    except HubSpotAPIError as exc:
        if exc.status != 409:
            logger.error("Failed to create HubSpot contact for user %s: %s", user.pk, exc.message)
            return None
        # contact already exists for this email
        try:
            contact_id = _existing_contact_id(client, user.email)
        except HubSpotAPIError as lookup_exc:
            logger.error("Failed to look up HubSpot contact for user %s: %s", user.pk, lookup_exc.message)
            return None
        if not contact_id:
            logger.error("HubSpot reported a conflict for user %s but no contact was found", user.pk)
            return None

    _store_contact_id(user, contact_id)
    logger.info("Synced user %s to HubSpot contact %s", user.pk, contact_id)
    customer_synced.send(sender=CustomerProfile, user=user, contact_id=contact_id)
    return contact_id


def sync_user_update(user, client=None) -> str | None:
    """Push name and billing changes; unsynced users get a contact created instead."""
    contact_id = get_contact_id(user)
    if not contact_id:
        return sync_new_user(user, client=client)

    try:
        client = client or get_client()
        client.update_contact(contact_id, contact_properties(user, include_billing=True))
    except HubSpotAPIError as exc:
        logger.error("Failed to update HubSpot contact %s: %s", contact_id, exc.message)
        return None

    CustomerProfile.objects.filter(user=user).update(synced_at=timezone.now())
    customer_updated.send(sender=CustomerProfile, user=user, contact_id=contact_id)
    return contact_id


def manual_sync_user(user_id, client=None) -> str | None:
    User = get_user_model()
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise CustomerSyncError("invalid_user", "Invalid user")

    if is_user_synced(user):
        return sync_user_update(user, client=client)
    return sync_new_user(user, client=client)


def get_user_orders(user):
    """Orders placed with the user's email, newest first."""
    if user is None or not getattr(user, "email", ""):
        return Order.objects.none()
    return Order.objects.filter(customer_email__iexact=user.email).order_by("-created_at", "-id")
