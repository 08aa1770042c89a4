"""Signals fired by the catalogue and currency sync."""
from django.dispatch import Signal

# kwargs: synced (int), errors (list)
products_synced = Signal()
# kwargs: product, hubspot_product (raw dict)
product_synced = Signal()
# kwargs: results (dict)
currencies_synced = Signal()
