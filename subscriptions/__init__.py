"""
Subscriptions app: marketing email preferences and commerce subscriptions.

Email subscription types are mirrored from HubSpot's communication
preferences so the checkout can offer opt-ins; customers manage their
preferences and view their recurring-billing subscriptions from their
account.  Available on licensed tiers only.
"""
