"""
Checkout service.

Turns a cart into a HubSpot-backed order.  The customer is matched to a
HubSpot contact by email (created when missing), then the tier decides the
payment path:

* licensed stores create an open HubSpot invoice and send the customer to
  its payment link; the order stays ``pending`` until the payment webhook
  reports the invoice status.
* free stores create a deal with line items and ask the configured
  payment-URL provider for a link (Stripe, PayPal, ...).  Without one the
  order has to be marked paid manually.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from common.features import can_use_invoices, can_use_subscriptions
from integrations.hubspot import ASSOC_DEAL_TO_CONTACT, ASSOC_LINE_ITEM_TO_DEAL, HubSpotAPIError, get_client
from payments.invoices import InvoiceError, create_invoice_from_cart
from products.currency import get_store_currency
from subscriptions.services import subscribe_contact_to_types

from .cart import clear_cart, get_items_with_products, get_total
from .models import Order, OrderItem
from .signals import checkout_processed, order_created

logger = logging.getLogger(__name__)

CONTACT_FIELDS = {
    "firstname": "first_name",
    "lastname": "last_name",
    "phone": "phone",
    "address": "address",
    "city": "city",
    "state": "state",
    "zip": "zip",
    "country": "country",
}


class CheckoutError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def prepare_contact_properties(customer_data: dict) -> dict:
    return {prop: str(customer_data.get(key) or "").strip() for prop, key in CONTACT_FIELDS.items()}


def get_or_create_contact(customer_data: dict, client=None) -> str:
    """HubSpot contact id for the customer's email; existing contacts get the latest details."""
    client = client or get_client()
    email = customer_data["email"]
    properties = prepare_contact_properties(customer_data)

    try:
        found = client.search_contact_by_email(email)
    except HubSpotAPIError as exc:
        raise CheckoutError("hubspot_error", exc.message) from exc

    results = found.get("results") or []
    if results and results[0].get("id"):
        contact_id = str(results[0]["id"])
        try:
            client.update_contact(contact_id, properties)
        except HubSpotAPIError as exc:
            logger.warning("Could not update contact %s: %s", contact_id, exc.message)
        return contact_id

    try:
        created = client.create_contact(email, properties)
    except HubSpotAPIError as exc:
        raise CheckoutError("hubspot_error", exc.message) from exc
    return str(created["id"])


def _create_order(cart, items, customer_data, billing_data, user, **fields) -> Order:
    with transaction.atomic():
        order = Order.objects.create(
            user=user if user is not None and user.is_authenticated else None,
            customer_email=customer_data["email"],
            customer_data=customer_data,
            billing_data=billing_data,
            currency=get_store_currency(),
            **fields,
        )
        for entry in items:
            item = entry["item"]
            OrderItem.objects.create(
                order=order,
                product=entry["product"],
                hubspot_product_id=item.hubspot_product_id,
                name=entry["product"].name if entry["product"] else "",
                quantity=item.quantity,
                unit_price=item.price,
            )
        order.recalc()
    return order


def _checkout_with_invoice(cart, items, contact_id, customer_data, billing_data, user, client) -> dict:
    try:
        invoice = create_invoice_from_cart(contact_id, cart, client=client)
    except InvoiceError as exc:
        raise CheckoutError(exc.code, exc.message) from exc
    invoice_id = str(invoice["id"])

    try:
        payment_url = client.get_invoice_payment_link(invoice_id)
    except HubSpotAPIError as exc:
        logger.error("Failed to fetch payment link for invoice %s: %s", invoice_id, exc.message)
        payment_url = ""
    if not payment_url:
        raise CheckoutError("no_payment_url", "Failed to get payment URL from HubSpot")

    order = _create_order(
        cart, items, customer_data, billing_data, user,
        status=Order.STATUS_PENDING,
        payment_status=Order.PAYMENT_PENDING,
        payment_method=Order.METHOD_HUBSPOT,
        hubspot_contact_id=contact_id,
        hubspot_invoice_id=invoice_id,
    )
    clear_cart(cart)
    checkout_processed.send(sender=Order, order=order, invoice_id=invoice_id)

    return {
        "success": True,
        "order_id": order.pk,
        "invoice_id": invoice_id,
        "payment_url": payment_url,
        "payment_method": Order.METHOD_HUBSPOT,
        "message": "Order created! Redirecting to payment...",
    }


def create_deal(contact_id: str, total, client) -> str:
    properties = {
        "dealname": f"Order from {settings.ECOMMERCE_STORE_NAME}",
        "amount": str(total),
        "dealstage": settings.ECOMMERCE_DEAL_STAGE,
        "pipeline": settings.ECOMMERCE_DEAL_PIPELINE,
        "closedate": timezone.now().date().isoformat(),
    }
    associations = [{
        "to": {"id": contact_id},
        "types": [{"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": ASSOC_DEAL_TO_CONTACT}],
    }]
    result = client.create_deal(properties, associations)
    return str(result["id"])


def add_line_items_to_deal(deal_id: str, items: list, client) -> list:
    line_items = [
        {
            "properties": {
                "hs_product_id": entry["item"].hubspot_product_id,
                "quantity": entry["item"].quantity,
                "price": str(entry["item"].price),
                "amount": str(entry["subtotal"]),
                "name": entry["product"].name,
            }
        }
        for entry in items
    ]
    result = client.batch_create_line_items(line_items)
    created = result.get("results") or []
    for line_item in created:
        try:
            client.create_association("line_items", line_item["id"], "deals", deal_id, ASSOC_LINE_ITEM_TO_DEAL)
        except HubSpotAPIError as exc:
            logger.warning("Could not associate line item %s to deal %s: %s", line_item["id"], deal_id, exc.message)
    return created


def get_payment_url(order, total, customer_data, billing_data) -> str:
    """Ask the configured ``ECOMMERCE_PAYMENT_URL_PROVIDER`` callable for a payment link."""
    path = getattr(settings, "ECOMMERCE_PAYMENT_URL_PROVIDER", "")
    if not path:
        return ""
    provider = import_string(path)
    return provider(order=order, total=total, customer_data=customer_data, billing_data=billing_data) or ""


def _checkout_with_deal(cart, items, contact_id, customer_data, billing_data, user, client) -> dict:
    total = get_total(cart)
    try:
        deal_id = create_deal(contact_id, total, client)
        add_line_items_to_deal(deal_id, items, client)
    except HubSpotAPIError as exc:
        logger.error("Deal checkout failed: %s", exc.message)
        raise CheckoutError("hubspot_error", exc.message) from exc

    order = _create_order(
        cart, items, customer_data, billing_data, user,
        status=Order.STATUS_COMPLETED,
        payment_status=Order.PAYMENT_PENDING,
        hubspot_contact_id=contact_id,
        hubspot_deal_id=deal_id,
    )
    payment_url = get_payment_url(order, total, customer_data, billing_data)
    order.payment_method = Order.METHOD_CUSTOM if payment_url else Order.METHOD_MANUAL
    order.save(update_fields=["payment_method", "updated_at"])

    clear_cart(cart)
    order_created.send(sender=Order, order=order, hubspot_id=deal_id)

    if not payment_url:
        return {
            "success": True,
            "order_id": order.pk,
            "deal_id": deal_id,
            "payment_url": None,
            "payment_method": Order.METHOD_MANUAL,
            "message": "Order created successfully! Please configure a payment gateway "
                       "or mark the order as paid manually.",
        }
    return {
        "success": True,
        "order_id": order.pk,
        "deal_id": deal_id,
        "payment_url": payment_url,
        "payment_method": Order.METHOD_CUSTOM,
        "message": "Order created! Redirecting to payment...",
    }


def process_checkout(cart, customer_data: dict, billing_data: dict | None = None, user=None,
                     subscription_type_ids=None, client=None) -> dict:
    items = get_items_with_products(cart)
    if not items:
        raise CheckoutError("empty_cart", "Cart is empty")

    client = client or get_client()
    billing_data = billing_data or {}
    contact_id = get_or_create_contact(customer_data, client=client)

    if subscription_type_ids and can_use_subscriptions():
        outcome = subscribe_contact_to_types(customer_data["email"], subscription_type_ids, client=client)
        failed = [sid for sid, res in outcome.items() if not res["success"]]
        if failed:
            logger.warning("Email opt-in failed for %s: %s", customer_data["email"], failed)

    if can_use_invoices():
        return _checkout_with_invoice(cart, items, contact_id, customer_data, billing_data, user, client)
    return _checkout_with_deal(cart, items, contact_id, customer_data, billing_data, user, client)


def get_order(order_id, user) -> Order | None:
    """Order visible to ``user``: staff see every order, customers only their own."""
    if user is None or not user.is_authenticated:
        raise CheckoutError("unauthorized", "Please log in to view orders")

    order = Order.objects.prefetch_related("items").filter(pk=order_id).first()
    if order is None:
        return None
    if user.is_staff or user.is_superuser:
        return order
    if not order.customer_email or order.customer_email.lower() != (user.email or "").lower():
        raise CheckoutError("forbidden", "Unauthorized access")
    return order
