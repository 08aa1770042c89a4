"""
Celery tasks for the payments app.

Webhook events are applied outside the request/response cycle so HubSpot
gets its acknowledgement quickly.  The reconciliation task catches invoice
status changes whose webhook never arrived.
"""
from __future__ import annotations

import logging

from celery import shared_task

from .invoices import reconcile_pending_orders
from .webhooks import dispatch_event

logger = logging.getLogger(__name__)


@shared_task
def process_webhook_events(events: list) -> int:
    """Apply a verified webhook delivery. Returns the number of orders touched."""
    touched = 0
    for event in events:
        try:
            if dispatch_event(event):
                touched += 1
        except Exception:
            logger.exception("Failed to apply webhook event %r", event)
    return touched


@shared_task
def reconcile_pending_orders_task() -> dict:
    return reconcile_pending_orders()
