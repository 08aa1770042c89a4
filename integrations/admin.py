from django.contrib import admin

from .models import SyncLog


@admin.register(SyncLog)
class SyncLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "sync_type", "status", "synced_count", "summary")
    list_filter = ("sync_type", "status")
    search_fields = ("summary", "error")
    readonly_fields = ("sync_type", "status", "synced_count", "summary", "error", "created_at", "updated_at")
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False
