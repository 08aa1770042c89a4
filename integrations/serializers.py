"""Serializers for the integrations app."""
from __future__ import annotations

from rest_framework import serializers

from .models import SyncLog


class SyncLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for SyncLog records."""

    class Meta:
        model = SyncLog
        fields = [
            "id",
            "sync_type",
            "status",
            "synced_count",
            "summary",
            "error",
            "created_at",
        ]
        read_only_fields = fields
