"""
URL configuration for the products app, included under ``/api/products/``.
"""
from django.urls import path
from rest_framework.routers import SimpleRouter

from .views import CurrencyListView, CurrencySyncView, ProductSyncView, ProductViewSet

router = SimpleRouter()
router.register(r"", ProductViewSet, basename="product")

urlpatterns = [
    path("currencies/", CurrencyListView.as_view(), name="currency-list"),
    path("sync/", ProductSyncView.as_view(), name="product-sync"),
    path("currencies/sync/", CurrencySyncView.as_view(), name="currency-sync"),
    *router.urls,
]
