"""Signals fired as invoices and payments change state."""
from django.dispatch import Signal

# kwargs: invoice_id, contact_id
invoice_created = Signal()

# kwargs: order, invoice_id
order_paid = Signal()
payment_failed = Signal()
payment_voided = Signal()

# kwargs: order, payment_id, amount
payment_created = Signal()
# kwargs: order, payment_id, status
payment_updated = Signal()
