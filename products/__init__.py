"""
Products app: local mirror of the HubSpot product library.

Products, their currency-specific prices and the account's enabled
currencies are pulled from HubSpot and served read-only to the storefront.
"""
