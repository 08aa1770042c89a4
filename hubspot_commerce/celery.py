"""
Celery application for the storefront backend.

Tasks are discovered from each app's ``tasks.py``; the periodic product
sync, cart cleanup and order reconciliation are scheduled through
``CELERY_BEAT_SCHEDULE`` in settings.
"""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hubspot_commerce.settings.dev")

celery_app = Celery("hubspot_commerce")
celery_app.config_from_object("django.conf:settings", namespace="CELERY")
celery_app.autodiscover_tasks()
