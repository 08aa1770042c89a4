"""Celery tasks that mirror users into HubSpot contacts."""
from __future__ import annotations

import logging

from celery import shared_task
from django.contrib.auth import get_user_model

from integrations.hubspot import HubSpotAPIError, get_client
from integrations.models import SyncLog

from .customers import is_user_synced, sync_new_user, sync_user_update

logger = logging.getLogger(__name__)


def _get_user(user_id):
    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None:
        logger.warning("User %s vanished before HubSpot sync", user_id)
    return user


@shared_task
def sync_new_user_to_hubspot(user_id):
    user = _get_user(user_id)
    if user is None:
        return None
    return sync_new_user(user)


@shared_task
def sync_user_update_to_hubspot(user_id):
    user = _get_user(user_id)
    if user is None:
        return None
    return sync_user_update(user)


@shared_task
def sync_all_customers(only_unsynced: bool = False) -> dict:
    """Sync every user with an email; records a ``SyncLog`` row."""
    try:
        client = get_client()
    except HubSpotAPIError as exc:
        SyncLog.record(SyncLog.TYPE_CUSTOMERS, errors=[exc.message])
        return {"synced": 0, "skipped": 0, "errors": [exc.message]}

    synced, skipped, errors = 0, 0, []
    users = get_user_model().objects.exclude(email="").order_by("id")
    for user in users.iterator():
        if is_user_synced(user):
            if only_unsynced:
                skipped += 1
                continue
            contact_id = sync_user_update(user, client=client)
        else:
            contact_id = sync_new_user(user, client=client)

        if contact_id:
            synced += 1
        else:
            errors.append(f"user {user.pk} ({user.email})")

    SyncLog.record(
        SyncLog.TYPE_CUSTOMERS,
        synced=synced,
        errors=errors,
        summary=f"{synced} customers synced, {skipped} skipped",
    )
    return {"synced": synced, "skipped": skipped, "errors": errors}
