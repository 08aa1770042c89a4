"""Signals fired by the cart and checkout services."""
from django.dispatch import Signal

# kwargs: cart, product_id, quantity
cart_item_added = Signal()
cart_item_updated = Signal()
# kwargs: cart, product_id
cart_item_removed = Signal()
# kwargs: cart
cart_cleared = Signal()

# kwargs: order, hubspot_id (deal id)
order_created = Signal()
# kwargs: order, invoice_id
checkout_processed = Signal()
