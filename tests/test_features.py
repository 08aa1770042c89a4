import pytest

from common import features


@pytest.mark.parametrize(
    "tier, status, licensed",
    [
        ("free", "active", False),
        ("pro", "inactive", False),
        ("pro", "active", True),
        ("Enterprise", "ACTIVE", True),
        ("", "active", False),
    ],
)
def test_is_licensed(settings, tier, status, licensed):
    settings.ECOMMERCE_TIER = tier
    settings.ECOMMERCE_LICENSE_STATUS = status
    assert features.is_licensed() is licensed
    assert features.can_use_invoices() is licensed
    assert features.can_use_subscriptions() is licensed
    assert features.can_use_email_preferences() is licensed
    assert features.can_use_auto_sync() is licensed


def test_multistore_needs_enterprise(settings):
    settings.ECOMMERCE_LICENSE_STATUS = "active"
    settings.ECOMMERCE_TIER = "pro"
    assert features.can_use_multistore() is False
    settings.ECOMMERCE_TIER = "enterprise"
    assert features.can_use_multistore() is True
    settings.ECOMMERCE_LICENSE_STATUS = "expired"
    assert features.can_use_multistore() is False


def test_defaults_to_free_tier(settings):
    del settings.ECOMMERCE_TIER
    assert features.get_tier() == features.TIER_FREE
