"""
Integrations app package for the HubSpot commerce backend.

Holds the HubSpot REST client used by every other app and a log of the
synchronization runs (products, currencies, subscription types and
customers) performed against the HubSpot account.
"""
