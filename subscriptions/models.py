from django.db import models


class EmailSubscriptionType(models.Model):
    """A HubSpot marketing email subscription definition."""

    hubspot_id = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    purpose = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False)
    # chosen by staff; when none is flagged the checkout offers every active non-default type
    show_on_checkout = models.BooleanField(default=False)
    synced_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.hubspot_id})"
