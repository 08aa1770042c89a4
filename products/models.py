# products/models.py
from decimal import Decimal

from django.db import models


class Product(models.Model):
    """Local copy of a HubSpot product (``hs_product``)."""

    STATUS_ACTIVE = "active"
    STATUS_ARCHIVED = "archived"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    hubspot_product_id = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sku = models.CharField(max_length=100, blank=True)
    cost_of_goods = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    product_type = models.CharField(max_length=50, default="simple")

    is_subscription = models.BooleanField(default=False)
    recurring_billing_period = models.CharField(max_length=50, blank=True)
    recurring_billing_frequency = models.CharField(max_length=50, blank=True)
    billing_period_units = models.CharField(max_length=50, blank=True)

    images = models.JSONField(default=list, blank=True)
    hubspot_data = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "id"]

    def __str__(self):
        return f"{self.name} ({self.hubspot_product_id})"

    @property
    def featured_image(self):
        return self.images[0] if self.images else None


class ProductPrice(models.Model):
    """Price of a product in a specific currency (HubSpot ``hs_price_<code>``)."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="prices")
    currency = models.CharField(max_length=3)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        unique_together = ("product", "currency")
        ordering = ["currency"]

    def __str__(self):
        return f"{self.product_id} {self.currency} {self.amount}"


class Currency(models.Model):
    """A currency enabled on the HubSpot account."""

    code = models.CharField(max_length=3, unique=True)
    conversion_rate = models.DecimalField(max_digits=18, decimal_places=8, default=Decimal("1"))
    visible = models.BooleanField(default=True)
    is_company_currency = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "currencies"

    def __str__(self):
        return self.code
