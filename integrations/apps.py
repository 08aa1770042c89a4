from django.apps import AppConfig


class IntegrationsConfig(AppConfig):
    """HubSpot API client, sync history and connection diagnostics."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "integrations"
    verbose_name = "HubSpot integration"
