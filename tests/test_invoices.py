"""
Tests for the invoice manager: building invoices from carts, status
handlers and reconciliation of pending orders.
"""
from decimal import Decimal

import pytest

from integrations.hubspot import HubSpotAPIError
from orders.cart import add_to_cart, get_or_create_cart
from orders.models import Order
from payments.invoices import (
    InvoiceError,
    create_invoice_from_cart,
    get_invoice_payment_status,
    handle_invoice_failed,
    handle_invoice_paid,
    handle_invoice_voided,
    reconcile_pending_orders,
)
from payments.signals import invoice_created, order_paid, payment_failed, payment_voided


@pytest.fixture
def cart(product, second_product):
    cart = get_or_create_cart(None)
    add_to_cart(cart, product.pk, 2)
    add_to_cart(cart, second_product.pk, 1)
    return cart


@pytest.fixture
def invoice_api(fake_hubspot):
    fake_hubspot.create_invoice.return_value = {"id": "inv-9"}
    fake_hubspot.create_line_item.side_effect = [{"id": "li-1"}, {"id": "li-2"}]
    fake_hubspot.update_invoice.return_value = {"id": "inv-9", "properties": {"hs_invoice_status": "open"}}
    return fake_hubspot


@pytest.mark.django_db
def test_create_invoice_from_cart(invoice_api, cart, signal_spy):
    handler = signal_spy(invoice_created)

    invoice = create_invoice_from_cart("c-1", cart)

    assert invoice["id"] == "inv-9"
    sent = invoice_api.create_invoice.call_args.args[0]["properties"]
    assert sent == {"hs_invoice_billable": True, "hs_currency": "USD", "hs_invoice_status": "draft"}
    invoice_api.associate_invoice_to_contact.assert_called_once_with("inv-9", "c-1")
    first_line = invoice_api.create_line_item.call_args_list[0].args[0]
    assert first_line == {"hs_product_id": "hs-100", "quantity": 2, "price": "10.00"}
    invoice_api.associate_line_item_to_invoice.assert_any_call("li-1", "inv-9")
    invoice_api.associate_line_item_to_invoice.assert_any_call("li-2", "inv-9")
    invoice_api.update_invoice.assert_called_once_with("inv-9", {"properties": {"hs_invoice_status": "open"}})
    handler.assert_called_once()
    assert handler.call_args.kwargs["contact_id"] == "c-1"


@pytest.mark.django_db
def test_association_failures_do_not_abort(invoice_api, cart):
    invoice_api.associate_invoice_to_contact.side_effect = HubSpotAPIError("nope", status=400)
    invoice_api.associate_line_item_to_invoice.side_effect = HubSpotAPIError("nope", status=400)

    invoice = create_invoice_from_cart("c-1", cart)

    assert invoice["id"] == "inv-9"
    invoice_api.update_invoice.assert_called_once()


@pytest.mark.django_db
def test_open_failure_raises(invoice_api, cart):
    invoice_api.update_invoice.side_effect = HubSpotAPIError("locked", status=409)
    with pytest.raises(InvoiceError) as exc:
        create_invoice_from_cart("c-1", cart)
    assert exc.value.code == "invoice_open_failed"


@pytest.mark.django_db
def test_create_failure_raises(invoice_api, cart):
    invoice_api.create_invoice.side_effect = HubSpotAPIError("bad", status=400)
    with pytest.raises(InvoiceError) as exc:
        create_invoice_from_cart("c-1", cart)
    assert exc.value.code == "invoice_create_failed"


@pytest.mark.django_db
def test_empty_cart_raises(invoice_api):
    with pytest.raises(InvoiceError) as exc:
        create_invoice_from_cart("c-1", get_or_create_cart(None))
    assert exc.value.code == "empty_cart"
    invoice_api.create_invoice.assert_not_called()


def test_payment_status_defaults_to_unknown(fake_hubspot):
    fake_hubspot.get_invoice.return_value = {"id": "inv-1", "properties": {}}
    assert get_invoice_payment_status("inv-1") == "unknown"
    fake_hubspot.get_invoice.return_value = {"properties": {"hs_invoice_status": "paid"}}
    assert get_invoice_payment_status("inv-1") == "paid"


@pytest.mark.django_db
def test_handlers_without_order_return_false():
    assert handle_invoice_paid("nope") is False
    assert handle_invoice_failed("nope") is False
    assert handle_invoice_voided("nope") is False


@pytest.mark.django_db
def test_failed_then_paid(invoice_order, signal_spy):
    failed = signal_spy(payment_failed)
    paid = signal_spy(order_paid)

    assert handle_invoice_failed("inv-1") is True
    invoice_order.refresh_from_db()
    assert (invoice_order.status, invoice_order.payment_status) == (Order.STATUS_FAILED, Order.PAYMENT_FAILED)

    assert handle_invoice_paid("inv-1") is True
    invoice_order.refresh_from_db()
    assert (invoice_order.status, invoice_order.payment_status) == (Order.STATUS_COMPLETED, Order.PAYMENT_PAID)
    assert failed.call_count == 1
    assert paid.call_count == 1


@pytest.mark.django_db
def test_paid_order_is_never_failed(invoice_order, signal_spy):
    failed = signal_spy(payment_failed)
    handle_invoice_paid("inv-1")

    assert handle_invoice_failed("inv-1") is True

    invoice_order.refresh_from_db()
    assert invoice_order.payment_status == Order.PAYMENT_PAID
    failed.assert_not_called()


@pytest.mark.django_db
def test_voided_cancels_once(invoice_order, signal_spy):
    voided = signal_spy(payment_voided)

    assert handle_invoice_voided("inv-1") is True
    assert handle_invoice_voided("inv-1") is True

    invoice_order.refresh_from_db()
    assert invoice_order.status == Order.STATUS_CANCELLED
    assert invoice_order.payment_status == Order.PAYMENT_VOIDED
    assert voided.call_count == 1


@pytest.mark.django_db
def test_reconcile_pending_orders(fake_hubspot, invoice_order):
    still_open = Order.objects.create(customer_email="b@example.com", hubspot_invoice_id="inv-2")
    Order.objects.create(customer_email="c@example.com", hubspot_deal_id="d-1", total=Decimal("1"))
    statuses = {"inv-1": "paid", "inv-2": "open"}
    fake_hubspot.get_invoice.side_effect = lambda invoice_id, **kw: {
        "properties": {"hs_invoice_status": statuses[invoice_id]}
    }

    result = reconcile_pending_orders()

    assert result == {"checked": 2, "updated": 1, "errors": []}
    invoice_order.refresh_from_db()
    still_open.refresh_from_db()
    assert invoice_order.payment_status == Order.PAYMENT_PAID
    assert still_open.status == Order.STATUS_PENDING


@pytest.mark.django_db
def test_reconcile_collects_errors(fake_hubspot, invoice_order):
    fake_hubspot.get_invoice.side_effect = HubSpotAPIError("timeout")

    result = reconcile_pending_orders()

    assert result["checked"] == 1
    assert result["updated"] == 0
    assert result["errors"] == ["inv-1: timeout"]
