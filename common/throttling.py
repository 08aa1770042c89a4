"""
Action-scoped rate limiting for storefront endpoints.

Views declare ``throttle_scope`` (``checkout``, ``add_to_cart`` ...) and the
limits come from ``settings.ECOMMERCE_RATE_LIMITS`` as
``(max_attempts, window_seconds)`` pairs.  Anonymous callers are keyed by
client IP, authenticated ones by user id.  Scopes without a rule are not
limited.
"""
from django.conf import settings
from rest_framework.throttling import ScopedRateThrottle


class ActionRateThrottle(ScopedRateThrottle):
    cache_format = "hs_ecom_rl_%(scope)s_%(ident)s"

    def get_rate(self):
        rules = getattr(settings, "ECOMMERCE_RATE_LIMITS", {})
        return rules.get(self.scope)

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        max_attempts, window = rate
        return (int(max_attempts), int(window))
