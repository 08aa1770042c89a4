from django.dispatch import Signal

# kwargs: types (list of EmailSubscriptionType)
subscription_types_synced = Signal()
