from django.contrib import admin

from .models import EmailSubscriptionType


@admin.register(EmailSubscriptionType)
class EmailSubscriptionTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "hubspot_id", "purpose", "is_active", "is_default", "show_on_checkout")
    list_filter = ("is_active", "is_default", "show_on_checkout")
    list_editable = ("show_on_checkout",)
    search_fields = ("name", "hubspot_id")
