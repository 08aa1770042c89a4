from django.conf import settings
from django.db import models
from django.db.models import F, Sum


class Cart(models.Model):
    """Anonymous or logged-in shopping cart keyed by the cart session cookie."""

    session_id = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="carts",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart {self.session_id}"


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("products.Product", on_delete=models.CASCADE, related_name="cart_items")
    hubspot_product_id = models.CharField(max_length=64)
    quantity = models.PositiveIntegerField(default=1)
    # unit price snapshot in the store currency at the time it was added
    price = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("cart", "product"),)
        ordering = ["created_at", "id"]

    @property
    def subtotal(self):
        return self.price * self.quantity


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_CANCELLED = "cancelled"
    STATUS = (
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_CANCELLED, "Cancelled"),
    )

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"
    PAYMENT_VOIDED = "voided"

    METHOD_HUBSPOT = "hubspot"
    METHOD_CUSTOM = "custom"
    METHOD_MANUAL = "manual"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    status = models.CharField(max_length=12, choices=STATUS, default=STATUS_PENDING, db_index=True)
    payment_status = models.CharField(max_length=32, default=PAYMENT_PENDING)
    payment_method = models.CharField(max_length=20, blank=True)

    hubspot_contact_id = models.CharField(max_length=64, blank=True)
    hubspot_deal_id = models.CharField(max_length=64, blank=True, db_index=True)
    hubspot_invoice_id = models.CharField(max_length=64, blank=True, db_index=True)

    payment_id = models.CharField(max_length=64, blank=True)
    payment_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payment_date = models.DateTimeField(null=True, blank=True)

    customer_email = models.EmailField(db_index=True)
    customer_data = models.JSONField(default=dict, blank=True)
    billing_data = models.JSONField(default=dict, blank=True)

    currency = models.CharField(max_length=3, default="USD")
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Order #{self.pk} ({self.status})"

    @property
    def is_paid(self):
        """Set once the HubSpot invoice is paid; payment events never clear it."""
        return self.payment_date is not None

    def recalc(self):
        agg = self.items.aggregate(s=Sum(F("line_total")))
        self.subtotal = agg["s"] or 0
        self.total = self.subtotal
        self.save(update_fields=["subtotal", "total", "updated_at"])


class OrderItem(models.Model):
    """Snapshot of a cart line at checkout time."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    hubspot_product_id = models.CharField(max_length=64)
    name = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.line_total = self.unit_price * self.quantity
        super().save(*args, **kwargs)
