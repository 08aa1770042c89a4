"""
Common test fixtures for the HubSpot commerce API tests.

Provides users and JWT-authenticated clients, a mocked HubSpot client
patched into every module that talks to HubSpot, a signal spy and a few
catalogue/order builders.
"""
import json
from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import Client

from integrations.hubspot import HubSpotClient
from orders.models import Order
from payments.webhooks import compute_signature
from products.models import Product

HUBSPOT_CLIENT_CONSUMERS = [
    "integrations.views",
    "orders.checkout",
    "payments.invoices",
    "products.currency",
    "products.sync",
    "subscriptions.services",
    "users.customers",
    "users.tasks",
]


@pytest.fixture(autouse=True)
def _clear_cache():
    """Rate-limit counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    """Create a test customer."""
    return User.objects.create_user(
        username="u1",
        password="pass12345",
        email="u1@example.com",
        first_name="Una",
        last_name="User",
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        username="staff", password="pass12345", email="staff@example.com", is_staff=True
    )


def _login(client, email, password="pass12345"):
    resp = client.post(
        "/api/auth/token/",
        {"email": email, "password": password},
        content_type="application/json",
    )
    assert resp.status_code == 200
    client.defaults["HTTP_AUTHORIZATION"] = f"Bearer {resp.json()['access']}"
    return client


@pytest.fixture
def auth_client(client, db, user):
    """Authenticate the Django test client using JWT tokens."""
    return _login(client, user.email)


@pytest.fixture
def staff_client(db, staff_user):
    return _login(Client(), staff_user.email)


@pytest.fixture
def licensed(settings):
    """Run the test on an active Pro licence."""
    settings.ECOMMERCE_TIER = "pro"
    settings.ECOMMERCE_LICENSE_STATUS = "active"
    return settings


@pytest.fixture
def fake_hubspot(monkeypatch):
    """A ``HubSpotClient`` mock returned by every ``get_client()`` call."""
    fake = mock.MagicMock(spec=HubSpotClient)
    for module in HUBSPOT_CLIENT_CONSUMERS:
        monkeypatch.setattr(f"{module}.get_client", lambda: fake)
    return fake


@pytest.fixture
def signal_spy():
    """Connect a mock receiver to a signal for the duration of the test."""
    connected = []

    def _spy(signal):
        handler = mock.Mock()
        signal.connect(handler, weak=False)
        connected.append((signal, handler))
        return handler

    yield _spy
    for signal, handler in connected:
        signal.disconnect(handler)


@pytest.fixture
def product(db):
    return Product.objects.create(
        hubspot_product_id="hs-100",
        name="Widget",
        price=Decimal("10.00"),
        sku="W-1",
    )


@pytest.fixture
def second_product(db):
    return Product.objects.create(
        hubspot_product_id="hs-200",
        name="Gadget",
        price=Decimal("5.50"),
    )


@pytest.fixture
def invoice_order(db):
    """A pending order waiting on HubSpot invoice ``inv-1``."""
    return Order.objects.create(
        customer_email="u1@example.com",
        hubspot_invoice_id="inv-1",
        hubspot_contact_id="c-1",
        payment_method=Order.METHOD_HUBSPOT,
        total=Decimal("25.00"),
        subtotal=Decimal("25.00"),
    )


@pytest.fixture
def signed_post(client, settings):
    """POST a JSON body to the payment webhook with a valid signature."""

    def _post(payload, signature=None, raw=None):
        body = raw if raw is not None else json.dumps(payload)
        if signature is None:
            signature = compute_signature(body.encode("utf-8"), settings.HUBSPOT_WEBHOOK_SECRET)
        return client.post(
            "/api/webhooks/payment/",
            data=body,
            content_type="application/json",
            HTTP_X_HUBSPOT_SIGNATURE=signature,
        )

    return _post
