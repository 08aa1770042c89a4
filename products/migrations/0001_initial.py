from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Currency",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=3, unique=True)),
                ("conversion_rate", models.DecimalField(decimal_places=8, default=Decimal("1"), max_digits=18)),
                ("visible", models.BooleanField(default=True)),
                ("is_company_currency", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["code"], "verbose_name_plural": "currencies"},
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hubspot_product_id", models.CharField(max_length=64, unique=True)),
                ("name", models.CharField(blank=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("sku", models.CharField(blank=True, max_length=100)),
                ("cost_of_goods", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("product_type", models.CharField(default="simple", max_length=50)),
                ("is_subscription", models.BooleanField(default=False)),
                ("recurring_billing_period", models.CharField(blank=True, max_length=50)),
                ("recurring_billing_frequency", models.CharField(blank=True, max_length=50)),
                ("billing_period_units", models.CharField(blank=True, max_length=50)),
                ("images", models.JSONField(blank=True, default=list)),
                ("hubspot_data", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("archived", "Archived")],
                        db_index=True,
                        default="active",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["name", "id"]},
        ),
        migrations.CreateModel(
            name="ProductPrice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("currency", models.CharField(max_length=3)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="prices",
                        to="products.product",
                    ),
                ),
            ],
            options={"ordering": ["currency"], "unique_together": {("product", "currency")}},
        ),
    ]
