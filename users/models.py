"""
Customer data kept next to Django's ``User``.

Every user gets exactly one ``CustomerProfile`` holding the id of the
matching HubSpot contact and the billing details sent along on updates.
"""
from django.conf import settings
from django.db import models


class CustomerProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="customer_profile"
    )
    hubspot_contact_id = models.CharField(max_length=64, blank=True, db_index=True)

    billing_phone = models.CharField(max_length=50, blank=True)
    billing_address_1 = models.CharField(max_length=255, blank=True)
    billing_city = models.CharField(max_length=100, blank=True)
    billing_state = models.CharField(max_length=100, blank=True)
    billing_postcode = models.CharField(max_length=20, blank=True)
    billing_country = models.CharField(max_length=100, blank=True)

    synced_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"CustomerProfile<{self.user_id}>"

    @property
    def is_synced(self) -> bool:
        return bool(self.hubspot_contact_id)
