"""
URL configuration for the HubSpot commerce backend.

Storefront endpoints (cart, checkout, orders) sit directly under ``/api/``;
authentication lives under ``/api/auth/`` and HubSpot calls back into
``/api/webhooks/``.
"""
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/", RedirectView.as_view(pattern_name="swagger-ui", permanent=False)),

    # Swagger/Redoc
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    path("api/auth/", include("users.urls")),
    path("api/products/", include("products.urls")),
    path("api/subscriptions/", include("subscriptions.urls")),
    path("api/integrations/", include("integrations.urls")),
    path("api/webhooks/", include("payments.urls")),
    path("api/", include("orders.urls")),
]
