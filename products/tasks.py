"""
Celery tasks for the products app.

``scheduled_product_sync`` runs from the beat schedule and only does work
when the store tier allows automatic sync and it has been switched on.
"""
from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings

from common.features import can_use_auto_sync

from .currency import sync_currencies
from .sync import sync_products

logger = logging.getLogger(__name__)


@shared_task
def scheduled_product_sync():
    if not (can_use_auto_sync() and getattr(settings, "ECOMMERCE_AUTO_SYNC_FROM_HUBSPOT", False)):
        logger.debug("Automatic product sync disabled; skipping")
        return None
    return sync_products()


@shared_task
def sync_products_task():
    return sync_products()


@shared_task
def sync_currencies_task():
    return sync_currencies()
