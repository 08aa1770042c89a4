"""
WSGI entry point for the HubSpot commerce backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hubspot_commerce.settings.dev")

application = get_wsgi_application()
