"""
Test settings: SQLite, in-memory cache and eager Celery so the suite runs
without PostgreSQL or Redis.
"""
from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key"
ALLOWED_HOSTS = ["*"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

HUBSPOT_ACCESS_TOKEN = "test-token"
HUBSPOT_WEBHOOK_SECRET = "test-webhook-secret"
HUBSPOT_MAX_RETRIES = 1

ECOMMERCE_STORE_NAME = "Test Shop"
ECOMMERCE_CURRENCY = "USD"
ECOMMERCE_TIER = "free"
ECOMMERCE_LICENSE_STATUS = "inactive"
ECOMMERCE_PAYMENT_URL_PROVIDER = ""
