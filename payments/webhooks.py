"""
HubSpot payment webhook processing.

HubSpot signs the raw request body with the app's webhook secret
(hex-encoded HMAC-SHA256) and sends it in ``X-HubSpot-Signature``.  A
delivery is either a single event object or a list of them; each event
is routed by its ``subscriptionType``:

* ``invoice.propertyChange`` on ``hs_invoice_status`` -> invoice handlers
* ``commerce_payment.created`` -> payment id and amount recorded on the order
* ``commerce_payment.updated`` -> payment status recorded on the order
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction

from orders.models import Order

from .invoices import STATUS_HANDLERS
from .signals import payment_created, payment_updated

logger = logging.getLogger(__name__)

EVENT_INVOICE_PROPERTY_CHANGE = "invoice.propertyChange"
EVENT_PAYMENT_CREATED = "commerce_payment.created"
EVENT_PAYMENT_UPDATED = "commerce_payment.updated"


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str | None = None) -> bool:
    """Timing-safe check of ``signature`` against the body HMAC."""
    if secret is None:
        secret = getattr(settings, "HUBSPOT_WEBHOOK_SECRET", "")
    if not signature:
        logger.warning("Webhook received without signature")
        return False
    if not secret:
        logger.error("Webhook rejected: HUBSPOT_WEBHOOK_SECRET is not configured")
        return False
    expected = compute_signature(body, secret)
    if not hmac.compare_digest(expected, signature.strip()):
        logger.warning("Webhook signature verification failed")
        return False
    return True


def normalize_payload(payload) -> list[dict]:
    """Return the events in a delivery; an empty list means the payload is invalid."""
    if isinstance(payload, dict):
        return [payload] if payload else []
    if isinstance(payload, list):
        if all(isinstance(event, dict) and event for event in payload):
            return list(payload)
        return []
    return []


def handle_invoice_property_change(invoice_id, event: dict) -> bool:
    if event.get("propertyName") != "hs_invoice_status":
        return False
    handler = STATUS_HANDLERS.get(event.get("propertyValue") or "")
    if handler is None:
        logger.debug("Ignoring invoice %s status %r", invoice_id, event.get("propertyValue"))
        return False
    return handler(invoice_id)


def _order_for_invoice(invoice_id):
    if not invoice_id:
        return None
    return Order.objects.select_for_update().filter(hubspot_invoice_id=str(invoice_id)).first()


def _properties(event: dict) -> dict:
    properties = event.get("properties")
    return properties if isinstance(properties, dict) else {}


def handle_payment_created(payment_id, event: dict) -> bool:
    properties = _properties(event)
    try:
        amount = Decimal(str(properties.get("hs_payment_amount") or 0))
    except InvalidOperation:
        amount = Decimal("0")

    with transaction.atomic():
        order = _order_for_invoice(properties.get("hs_invoice_id"))
        if order is None:
            return False
        order.payment_id = str(payment_id or "")
        order.payment_amount = amount
        order.save(update_fields=["payment_id", "payment_amount", "updated_at"])

    payment_created.send(sender=Order, order=order, payment_id=order.payment_id, amount=amount)
    return True


def handle_payment_updated(payment_id, event: dict) -> bool:
    properties = _properties(event)
    status = str(properties.get("hs_payment_status") or "")[:32]

    with transaction.atomic():
        order = _order_for_invoice(properties.get("hs_invoice_id"))
        if order is None:
            return False
        if order.is_paid and status.lower() == Order.PAYMENT_FAILED:
            logger.warning("Ignoring payment failure for paid order %s", order.pk)
            return True
        order.payment_status = status
        order.save(update_fields=["payment_status", "updated_at"])

    payment_updated.send(sender=Order, order=order, payment_id=str(payment_id or ""), status=status)
    return True


def dispatch_event(event: dict) -> bool:
    """Route one webhook event; returns whether an order was touched."""
    event_type = event.get("subscriptionType") or ""
    object_id = event.get("objectId") or ""
    logger.info("HubSpot webhook received: %s object=%s", event_type, object_id)

    if event_type == EVENT_INVOICE_PROPERTY_CHANGE:
        return handle_invoice_property_change(object_id, event)
    if event_type == EVENT_PAYMENT_CREATED:
        return handle_payment_created(object_id, event)
    if event_type == EVENT_PAYMENT_UPDATED:
        return handle_payment_updated(object_id, event)

    logger.warning("Unknown webhook event type: %s", event_type)
    return False
