# products/serializers.py
from rest_framework import serializers

from .currency import format_price, get_store_currency
from .models import Product
from .sync import get_product_price


class ProductSerializer(serializers.ModelSerializer):
    """Product with its price resolved in the requested currency.

    The currency comes from ``context["currency"]`` and falls back to the
    store currency.
    """

    currency = serializers.SerializerMethodField()
    display_price = serializers.SerializerMethodField()
    formatted_price = serializers.SerializerMethodField()
    prices = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "hubspot_product_id",
            "name",
            "description",
            "price",
            "currency",
            "display_price",
            "formatted_price",
            "prices",
            "sku",
            "product_type",
            "is_subscription",
            "recurring_billing_period",
            "recurring_billing_frequency",
            "billing_period_units",
            "images",
            "featured_image",
        ]

    def _currency(self):
        return (self.context.get("currency") or get_store_currency()).upper()

    def get_currency(self, obj):
        return self._currency()

    def get_display_price(self, obj):
        return str(get_product_price(obj, self._currency()))

    def get_formatted_price(self, obj):
        code = self._currency()
        return format_price(get_product_price(obj, code), code)

    def get_prices(self, obj):
        return {p.currency: str(p.amount) for p in obj.prices.all()}


class ProductMiniSerializer(serializers.ModelSerializer):
    """Used inside cart and order item serializers."""

    class Meta:
        model = Product
        fields = ["id", "hubspot_product_id", "name", "price", "sku", "featured_image"]
