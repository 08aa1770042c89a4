# orders/serializers.py
from rest_framework import serializers

from products.serializers import ProductMiniSerializer

from .models import CartItem, Order, OrderItem


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductMiniSerializer(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "product", "hubspot_product_id", "quantity", "price", "subtotal"]


class AddToCartSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product", "hubspot_product_id", "name", "quantity", "unit_price", "line_total"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "payment_status",
            "payment_method",
            "hubspot_deal_id",
            "hubspot_invoice_id",
            "payment_amount",
            "payment_date",
            "customer_email",
            "customer_data",
            "billing_data",
            "currency",
            "subtotal",
            "total",
            "items",
            "created_at",
        ]


class CheckoutRequestSerializer(serializers.Serializer):
    """Customer and billing details posted from the checkout form."""

    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    zip = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.CharField(max_length=50, required=False, default="manual")
    email_subscriptions = serializers.ListField(
        child=serializers.CharField(max_length=64), required=False, default=list
    )

    CUSTOMER_FIELDS = ("email", "first_name", "last_name", "phone", "address", "city", "state", "zip", "country")

    def split(self):
        data = self.validated_data
        customer = {key: data[key] for key in self.CUSTOMER_FIELDS}
        billing = {"notes": data["notes"], "payment_method": data["payment_method"]}
        return customer, billing, list(data["email_subscriptions"])
