"""
Customer signals and the ``User`` hook that drives HubSpot contact sync.

Every user gets a ``CustomerProfile``.  Syncing runs in Celery once the
surrounding transaction commits, so a slow or failing HubSpot never blocks
registration.
"""
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import Signal, receiver

from .models import CustomerProfile

# kwargs: user, contact_id
customer_synced = Signal()
customer_updated = Signal()

User = get_user_model()

IGNORED_UPDATE_FIELDS = {"last_login"}


@receiver(post_save, sender=User)
def sync_customer(sender, instance, created, update_fields=None, raw=False, **kwargs):
    if raw:
        return
    CustomerProfile.objects.get_or_create(user=instance)

    if update_fields and set(update_fields) <= IGNORED_UPDATE_FIELDS:
        return

    from .tasks import sync_new_user_to_hubspot, sync_user_update_to_hubspot

    task = sync_new_user_to_hubspot if created else sync_user_update_to_hubspot
    user_id = instance.pk
    transaction.on_commit(lambda: task.delay(user_id))
