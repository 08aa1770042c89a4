"""
Admin configuration for the users app.

The stock ``User`` admin is re-registered with the customer profile inline
and an action that pushes the selected users to HubSpot.
"""
from django.contrib import admin, messages
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .customers import manual_sync_user
from .models import CustomerProfile

User = get_user_model()


class CustomerProfileInline(admin.StackedInline):
    model = CustomerProfile
    can_delete = False
    readonly_fields = ("hubspot_contact_id", "synced_at")


@admin.action(description="Sync selected users to HubSpot")
def sync_to_hubspot(modeladmin, request, queryset):
    synced = 0
    for user in queryset:
        if manual_sync_user(user.pk):
            synced += 1
    level = messages.SUCCESS if synced == queryset.count() else messages.WARNING
    modeladmin.message_user(request, f"{synced} of {queryset.count()} users synced to HubSpot.", level)


admin.site.unregister(User)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    inlines = [CustomerProfileInline]
    list_display = ("username", "email", "first_name", "last_name", "hubspot_contact", "is_staff")
    actions = [sync_to_hubspot]

    @admin.display(description="HubSpot contact")
    def hubspot_contact(self, obj):
        profile = getattr(obj, "customer_profile", None)
        return profile.hubspot_contact_id if profile else ""
