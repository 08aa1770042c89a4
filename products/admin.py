from django.contrib import admin

from .models import Currency, Product, ProductPrice


class ProductPriceInline(admin.TabularInline):
    model = ProductPrice
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "sku", "hubspot_product_id", "is_subscription", "status")
    list_filter = ("status", "is_subscription", "product_type")
    search_fields = ("name", "sku", "hubspot_product_id")
    readonly_fields = ("hubspot_data", "created_at", "updated_at")
    inlines = [ProductPriceInline]


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ("code", "conversion_rate", "visible", "is_company_currency", "updated_at")
