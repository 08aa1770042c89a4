"""
Database models for the integrations app.

A ``SyncLog`` row is written for every synchronization run against
HubSpot.  Background sync failures never bubble up to the user action
that triggered them, so the log is the place to look when products or
contacts stop showing up.
"""
from __future__ import annotations

from django.db import models


class SyncLog(models.Model):
    """Record of a single synchronization run with HubSpot."""

    TYPE_PRODUCTS = "products"
    TYPE_CURRENCIES = "currencies"
    TYPE_SUBSCRIPTION_TYPES = "subscription_types"
    TYPE_CUSTOMERS = "customers"
    TYPE_CHOICES = [
        (TYPE_PRODUCTS, "Products"),
        (TYPE_CURRENCIES, "Currencies"),
        (TYPE_SUBSCRIPTION_TYPES, "Email subscription types"),
        (TYPE_CUSTOMERS, "Customers"),
    ]

    STATUS_SUCCESS = "success"
    STATUS_PARTIAL = "partial"
    STATUS_FAILED = "failed"
    STATUS_CHOICES = [
        (STATUS_SUCCESS, "Success"),
        (STATUS_PARTIAL, "Partial"),
        (STATUS_FAILED, "Failed"),
    ]

    sync_type = models.CharField(max_length=32, choices=TYPE_CHOICES, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    synced_count = models.PositiveIntegerField(default=0)
    summary = models.TextField(blank=True, help_text="Short description of what was synced.")
    error = models.TextField(blank=True, help_text="Error messages if the sync failed.")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"SyncLog({self.sync_type}, {self.status})"

    @classmethod
    def record(cls, sync_type: str, synced: int = 0, errors=None, summary: str = "") -> "SyncLog":
        """Create a log row, deriving the status from the counts and errors."""
        errors = [str(e) for e in (errors or [])]
        if not errors:
            status = cls.STATUS_SUCCESS
        elif synced:
            status = cls.STATUS_PARTIAL
        else:
            status = cls.STATUS_FAILED
        return cls.objects.create(
            sync_type=sync_type,
            status=status,
            synced_count=synced,
            summary=summary[:1024],
            error="\n".join(errors)[:4096],
        )
