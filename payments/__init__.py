"""
Payments app package for the HubSpot commerce backend.

Receives HubSpot payment webhooks, creates invoices for licensed stores
and reconciles invoice status changes onto local orders.  The app owns no
tables of its own; it drives state on ``orders.Order``.
"""
