"""
Licence-tier feature gating.

The store runs on the ``free`` tier unless ``ECOMMERCE_TIER`` is ``pro`` or
``enterprise`` and ``ECOMMERCE_LICENSE_STATUS`` is ``active``.  Paid tiers
unlock HubSpot invoice checkout, subscriptions, email preferences and the
scheduled product sync; free stores check out through deals and sync
products manually.
"""
from django.conf import settings

TIER_FREE = "free"
TIER_PRO = "pro"
TIER_ENTERPRISE = "enterprise"
PAID_TIERS = (TIER_PRO, TIER_ENTERPRISE)


def get_tier() -> str:
    return (getattr(settings, "ECOMMERCE_TIER", TIER_FREE) or TIER_FREE).lower()


def get_license_status() -> str:
    return (getattr(settings, "ECOMMERCE_LICENSE_STATUS", "inactive") or "inactive").lower()


def is_licensed() -> bool:
    """True for any paid tier with an active licence."""
    return get_tier() in PAID_TIERS and get_license_status() == "active"


def can_use_invoices() -> bool:
    return is_licensed()


def can_use_subscriptions() -> bool:
    return is_licensed()


def can_use_email_preferences() -> bool:
    return is_licensed()


def can_use_auto_sync() -> bool:
    return is_licensed()


def can_use_multistore() -> bool:
    return is_licensed() and get_tier() == TIER_ENTERPRISE
