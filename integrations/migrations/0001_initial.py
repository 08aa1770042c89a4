"""
Initial migration for the integrations app.

Creates the SyncLog table.
"""
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SyncLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "sync_type",
                    models.CharField(
                        choices=[
                            ("products", "Products"),
                            ("currencies", "Currencies"),
                            ("subscription_types", "Email subscription types"),
                            ("customers", "Customers"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("success", "Success"), ("partial", "Partial"), ("failed", "Failed")],
                        max_length=20,
                    ),
                ),
                ("synced_count", models.PositiveIntegerField(default=0)),
                ("summary", models.TextField(blank=True, help_text="Short description of what was synced.")),
                ("error", models.TextField(blank=True, help_text="Error messages if the sync failed.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["-created_at"]},
        ),
    ]
