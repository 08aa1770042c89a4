"""
HubSpot invoice management.

Licensed stores check out through HubSpot invoices: the cart becomes an
open invoice whose payment link the customer is sent to.  HubSpot later
reports the invoice status (paid, failed or voided) through the payment
webhook or the reconciliation task, and the handlers below move the local
order accordingly.

Status handlers are idempotent.  Re-delivering the same status leaves the
order untouched and fires no signal, and a paid order is never moved back
to failed.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from integrations.hubspot import HubSpotAPIError, get_client
from orders.cart import get_items_with_products
from orders.models import Order
from products.currency import get_store_currency

from .signals import invoice_created, order_paid, payment_failed, payment_voided

logger = logging.getLogger(__name__)

INVOICE_PAID = "paid"
INVOICE_FAILED = "failed"
INVOICE_VOIDED = "voided"


class InvoiceError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def create_invoice_from_cart(contact_id: str, cart, client=None) -> dict:
    """Create an open HubSpot invoice for ``cart`` billed to ``contact_id``."""
    client = client or get_client()
    items = get_items_with_products(cart)
    if not items:
        raise InvoiceError("empty_cart", "Cart is empty")

    try:
        invoice = client.create_invoice({
            "properties": {
                "hs_invoice_billable": True,
                "hs_currency": get_store_currency(),
                "hs_invoice_status": "draft",
            }
        })
    except HubSpotAPIError as exc:
        logger.error("Failed to create HubSpot invoice: %s", exc.message)
        raise InvoiceError("invoice_create_failed", exc.message) from exc
    invoice_id = str(invoice["id"])

    try:
        client.associate_invoice_to_contact(invoice_id, contact_id)
    except HubSpotAPIError as exc:
        logger.error("Failed to associate invoice %s to contact %s: %s", invoice_id, contact_id, exc.message)

    for entry in items:
        item = entry["item"]
        try:
            line_item = client.create_line_item({
                "hs_product_id": item.hubspot_product_id,
                "quantity": item.quantity,
                "price": str(item.price),
            })
            client.associate_line_item_to_invoice(str(line_item["id"]), invoice_id)
        except HubSpotAPIError as exc:
            logger.error("Failed to add line item %s to invoice %s: %s", item.hubspot_product_id, invoice_id, exc.message)

    try:
        updated = client.update_invoice(invoice_id, {"properties": {"hs_invoice_status": "open"}})
    except HubSpotAPIError as exc:
        logger.error("Failed to open invoice %s: %s", invoice_id, exc.message)
        raise InvoiceError("invoice_open_failed", exc.message) from exc

    updated = dict(updated or {})
    updated.setdefault("id", invoice_id)
    invoice_created.send(sender=Order, invoice_id=invoice_id, contact_id=contact_id)
    return updated


def get_invoice_payment_status(invoice_id: str, client=None) -> str:
    client = client or get_client()
    invoice = client.get_invoice(invoice_id)
    return (invoice.get("properties") or {}).get("hs_invoice_status") or "unknown"


def _apply_status(invoice_id, status, payment_status, signal, stamp_payment_date=False) -> bool:
    invoice_id = str(invoice_id)
    with transaction.atomic():
        order = Order.objects.select_for_update().filter(hubspot_invoice_id=invoice_id).first()
        if order is None:
            logger.warning("No order found for invoice %s", invoice_id)
            return False

        if order.status == status:
            logger.info("Order %s already %s; ignoring duplicate", order.pk, status)
            return True
        if payment_status == Order.PAYMENT_FAILED and order.is_paid:
            logger.warning("Ignoring failure for paid order %s (invoice %s)", order.pk, invoice_id)
            return True

        order.status = status
        order.payment_status = payment_status
        fields = ["status", "payment_status", "updated_at"]
        if stamp_payment_date:
            order.payment_date = timezone.now()
            fields.append("payment_date")
        order.save(update_fields=fields)

    logger.info("Order %s -> %s (invoice %s)", order.pk, status, invoice_id)
    signal.send(sender=Order, order=order, invoice_id=invoice_id)
    return True


def handle_invoice_paid(invoice_id) -> bool:
    return _apply_status(invoice_id, Order.STATUS_COMPLETED, Order.PAYMENT_PAID, order_paid, stamp_payment_date=True)


def handle_invoice_failed(invoice_id) -> bool:
    return _apply_status(invoice_id, Order.STATUS_FAILED, Order.PAYMENT_FAILED, payment_failed)


def handle_invoice_voided(invoice_id) -> bool:
    return _apply_status(invoice_id, Order.STATUS_CANCELLED, Order.PAYMENT_VOIDED, payment_voided)


STATUS_HANDLERS = {
    INVOICE_PAID: handle_invoice_paid,
    INVOICE_FAILED: handle_invoice_failed,
    INVOICE_VOIDED: handle_invoice_voided,
}


def reconcile_pending_orders(client=None) -> dict:
    """Poll HubSpot for every pending invoice order and apply status changes missed by webhooks."""
    client = client or get_client()
    results = {"checked": 0, "updated": 0, "errors": []}

    pending = Order.objects.filter(status=Order.STATUS_PENDING).exclude(hubspot_invoice_id="")
    for invoice_id in pending.values_list("hubspot_invoice_id", flat=True):
        results["checked"] += 1
        try:
            status = get_invoice_payment_status(invoice_id, client=client)
        except HubSpotAPIError as exc:
            logger.warning("Could not fetch invoice %s: %s", invoice_id, exc.message)
            results["errors"].append(f"{invoice_id}: {exc.message}")
            continue

        handler = STATUS_HANDLERS.get(status)
        if handler and handler(invoice_id):
            results["updated"] += 1

    if results["updated"]:
        logger.info("Reconciled %d of %d pending orders", results["updated"], results["checked"])
    return results
