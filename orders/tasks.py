"""
Celery tasks for the orders app.

Cart lines are session data, not order history: lines older than
``ECOMMERCE_CART_RETENTION_DAYS`` are purged daily together with carts
that have nothing left in them.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .models import Cart, CartItem

logger = logging.getLogger(__name__)


@shared_task
def cleanup_old_cart_sessions() -> dict:
    cutoff = timezone.now() - timedelta(days=settings.ECOMMERCE_CART_RETENTION_DAYS)
    deleted_items, _ = CartItem.objects.filter(created_at__lt=cutoff).delete()
    deleted_carts, _ = Cart.objects.filter(updated_at__lt=cutoff, items__isnull=True).delete()
    if deleted_items or deleted_carts:
        logger.info("Cart cleanup removed %d items and %d carts older than %s", deleted_items, deleted_carts, cutoff)
    return {"deleted": deleted_items, "carts_deleted": deleted_carts, "cutoff_date": cutoff.isoformat()}
