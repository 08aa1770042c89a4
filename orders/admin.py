from django.contrib import admin

from .models import Cart, CartItem, Order, OrderItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("session_id", "user", "created_at", "updated_at")
    search_fields = ("session_id", "user__email")
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("line_total",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer_email",
        "status",
        "payment_status",
        "payment_method",
        "total",
        "currency",
        "created_at",
    )
    list_filter = ("status", "payment_status", "payment_method")
    search_fields = ("customer_email", "hubspot_deal_id", "hubspot_invoice_id")
    ordering = ("-created_at",)
    inlines = [OrderItemInline]
