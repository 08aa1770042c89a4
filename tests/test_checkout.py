"""
Tests for checkout: contact matching, the deal path used by free stores,
the HubSpot invoice path of licensed stores and the checkout/order
endpoints.
"""
from decimal import Decimal
from unittest import mock

import pytest

from integrations.hubspot import HubSpotAPIError
from orders.cart import add_to_cart, get_item_count, get_or_create_cart
from orders.checkout import CheckoutError, get_order, get_or_create_contact, process_checkout
from orders.models import Order
from orders.signals import checkout_processed, order_created

CUSTOMER = {
    "email": "buyer@example.com",
    "first_name": "Bea",
    "last_name": "Buyer",
    "phone": "555-0100",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
    "country": "US",
}


@pytest.fixture
def cart(product, second_product):
    cart = get_or_create_cart(None)
    add_to_cart(cart, product.pk, 2)
    add_to_cart(cart, second_product.pk, 1)
    return cart


@pytest.fixture
def new_contact(fake_hubspot):
    fake_hubspot.search_contact_by_email.return_value = {"results": []}
    fake_hubspot.create_contact.return_value = {"id": "c-1"}
    return fake_hubspot


@pytest.fixture
def deal_api(new_contact):
    new_contact.create_deal.return_value = {"id": "d-1"}
    new_contact.batch_create_line_items.return_value = {"results": [{"id": "li-1"}, {"id": "li-2"}]}
    return new_contact


@pytest.fixture
def invoice_api(new_contact):
    new_contact.create_invoice.return_value = {"id": "inv-1"}
    new_contact.create_line_item.return_value = {"id": "li-1"}
    new_contact.update_invoice.return_value = {"id": "inv-1"}
    new_contact.get_invoice_payment_link.return_value = "https://pay.hubspot.com/inv-1"
    return new_contact


def test_existing_contact_is_updated(fake_hubspot):
    fake_hubspot.search_contact_by_email.return_value = {"results": [{"id": "c-9"}]}

    assert get_or_create_contact(CUSTOMER) == "c-9"

    fake_hubspot.create_contact.assert_not_called()
    contact_id, props = fake_hubspot.update_contact.call_args.args
    assert contact_id == "c-9"
    assert props["firstname"] == "Bea"
    assert props["zip"] == "62701"


def test_new_contact_is_created(new_contact):
    assert get_or_create_contact(CUSTOMER) == "c-1"
    email, props = new_contact.create_contact.call_args.args
    assert email == "buyer@example.com"
    assert props["lastname"] == "Buyer"


def test_contact_lookup_failure_aborts(fake_hubspot):
    fake_hubspot.search_contact_by_email.side_effect = HubSpotAPIError("down")
    with pytest.raises(CheckoutError) as exc:
        get_or_create_contact(CUSTOMER)
    assert exc.value.code == "hubspot_error"


@pytest.mark.django_db
def test_deal_checkout_without_payment_provider(deal_api, cart, signal_spy):
    created = signal_spy(order_created)

    result = process_checkout(cart, dict(CUSTOMER), {"notes": "leave at door"})

    assert result["success"] is True
    assert result["deal_id"] == "d-1"
    assert result["payment_url"] is None
    assert result["payment_method"] == Order.METHOD_MANUAL

    order = Order.objects.get(pk=result["order_id"])
    assert order.status == Order.STATUS_COMPLETED
    assert order.payment_status == Order.PAYMENT_PENDING
    assert order.hubspot_deal_id == "d-1"
    assert order.hubspot_contact_id == "c-1"
    assert order.total == Decimal("25.50")
    assert order.billing_data == {"notes": "leave at door"}
    assert sorted(i.name for i in order.items.all()) == ["Gadget", "Widget"]
    assert get_item_count(cart) == 0

    props = deal_api.create_deal.call_args.args[0]
    assert props["amount"] == "25.50"
    deal_api.create_association.assert_any_call("line_items", "li-1", "deals", "d-1", 19)
    assert created.call_args.kwargs["hubspot_id"] == "d-1"
    deal_api.create_invoice.assert_not_called()


@pytest.mark.django_db
def test_deal_checkout_with_payment_provider(deal_api, cart, settings):
    settings.ECOMMERCE_PAYMENT_URL_PROVIDER = "shop.payments.stripe_link"
    provider = mock.Mock(return_value="https://pay.example.com/abc")

    with mock.patch("orders.checkout.import_string", return_value=provider):
        result = process_checkout(cart, dict(CUSTOMER))

    assert result["payment_url"] == "https://pay.example.com/abc"
    assert result["payment_method"] == Order.METHOD_CUSTOM
    kwargs = provider.call_args.kwargs
    assert kwargs["total"] == Decimal("25.50")
    assert kwargs["order"].pk == result["order_id"]
    assert Order.objects.get(pk=result["order_id"]).payment_method == Order.METHOD_CUSTOM


@pytest.mark.django_db
def test_deal_failure_creates_no_order(deal_api, cart):
    deal_api.create_deal.side_effect = HubSpotAPIError("bad deal")
    with pytest.raises(CheckoutError):
        process_checkout(cart, dict(CUSTOMER))
    assert not Order.objects.exists()
    assert get_item_count(cart) == 3


@pytest.mark.django_db
def test_invoice_checkout_for_licensed_store(invoice_api, cart, licensed, signal_spy):
    processed = signal_spy(checkout_processed)
    created = signal_spy(order_created)

    result = process_checkout(cart, dict(CUSTOMER))

    assert result["invoice_id"] == "inv-1"
    assert result["payment_url"] == "https://pay.hubspot.com/inv-1"
    assert result["payment_method"] == Order.METHOD_HUBSPOT
    order = Order.objects.get(pk=result["order_id"])
    assert order.status == Order.STATUS_PENDING
    assert order.payment_status == Order.PAYMENT_PENDING
    assert order.hubspot_invoice_id == "inv-1"
    assert get_item_count(cart) == 0
    assert processed.call_args.kwargs["invoice_id"] == "inv-1"
    created.assert_not_called()
    invoice_api.create_deal.assert_not_called()


@pytest.mark.django_db
def test_invoice_without_payment_link_fails(invoice_api, cart, licensed):
    invoice_api.get_invoice_payment_link.return_value = ""
    with pytest.raises(CheckoutError) as exc:
        process_checkout(cart, dict(CUSTOMER))
    assert exc.value.code == "no_payment_url"
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_free_store_skips_email_opt_in(deal_api, cart):
    process_checkout(cart, dict(CUSTOMER), subscription_type_ids=["123"])
    deal_api.subscribe_contact.assert_not_called()


@pytest.mark.django_db
def test_licensed_store_opts_in_at_checkout(invoice_api, cart, licensed):
    process_checkout(cart, dict(CUSTOMER), subscription_type_ids=["123"])
    invoice_api.subscribe_contact.assert_called_once_with(
        "buyer@example.com", "123", "CONSENT", "Subscribed during checkout"
    )


@pytest.mark.django_db
def test_empty_cart_cannot_check_out(fake_hubspot):
    with pytest.raises(CheckoutError) as exc:
        process_checkout(get_or_create_cart(None), dict(CUSTOMER))
    assert exc.value.code == "empty_cart"
    fake_hubspot.search_contact_by_email.assert_not_called()


@pytest.mark.django_db
def test_checkout_endpoint(client, deal_api, product, settings):
    client.post("/api/cart/items/", {"product_id": product.pk}, content_type="application/json")

    resp = client.post("/api/checkout/", {"email": "buyer@example.com"}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["code"] == "missing_fields"

    payload = {"email": "buyer@example.com", "first_name": "Bea", "last_name": "Buyer", "city": "Springfield"}
    resp = client.post("/api/checkout/", payload, content_type="application/json")
    assert resp.status_code == 201
    body = resp.json()
    assert body["redirect_url"] == f"{settings.FRONTEND_URL}/order-confirmation/?order_id={body['order_id']}"
    assert body["cart_count"] == 0
    order = Order.objects.get(pk=body["order_id"])
    assert order.customer_data["city"] == "Springfield"
    assert order.user is None


@pytest.mark.django_db
def test_checkout_endpoint_reports_hubspot_errors(client, deal_api, product):
    deal_api.create_deal.side_effect = HubSpotAPIError("boom")
    client.post("/api/cart/items/", {"product_id": product.pk}, content_type="application/json")

    payload = {"email": "buyer@example.com", "first_name": "Bea", "last_name": "Buyer"}
    resp = client.post("/api/checkout/", payload, content_type="application/json")

    assert resp.status_code == 400
    assert resp.json()["code"] == "hubspot_error"


@pytest.mark.django_db
def test_order_visibility(user, staff_user):
    mine = Order.objects.create(customer_email="U1@example.com")
    theirs = Order.objects.create(customer_email="other@example.com")

    assert get_order(mine.pk, user) == mine
    with pytest.raises(CheckoutError) as exc:
        get_order(theirs.pk, user)
    assert exc.value.code == "forbidden"
    assert get_order(theirs.pk, staff_user) == theirs
    assert get_order(99999, user) is None


@pytest.mark.django_db
def test_order_endpoints(auth_client, user):
    Order.objects.create(customer_email=user.email, total=Decimal("5.00"))
    newest = Order.objects.create(customer_email=user.email, total=Decimal("7.00"))
    other = Order.objects.create(customer_email="other@example.com")

    resp = auth_client.get("/api/orders/")
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()][0] == newest.pk
    assert len(resp.json()) == 2

    assert auth_client.get(f"/api/orders/{newest.pk}/").status_code == 200
    assert auth_client.get(f"/api/orders/{other.pk}/").status_code == 403
    assert auth_client.get("/api/orders/99999/").status_code == 404


@pytest.mark.django_db
def test_orders_require_login(client):
    assert client.get("/api/orders/").status_code == 401
