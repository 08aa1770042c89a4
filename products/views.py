"""
Views for the products app.

The catalogue is public and read-only; staff can trigger a product or
currency sync by hand.
"""
from __future__ import annotations

from rest_framework import permissions, views, viewsets
from rest_framework.response import Response

from .currency import format_price, get_enabled_currencies, get_store_currency, get_currency_data, sync_currencies
from .models import Product
from .serializers import ProductSerializer
from .sync import sync_products


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """Active products; ``?currency=EUR`` prices them in another currency."""

    serializer_class = ProductSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        qs = Product.objects.filter(status=Product.STATUS_ACTIVE).prefetch_related("prices")
        search = self.request.query_params.get("search")
        if search:
            qs = qs.filter(name__icontains=search)
        if self.request.query_params.get("subscription") in ("1", "true"):
            qs = qs.filter(is_subscription=True)
        return qs

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        ctx["currency"] = self.request.query_params.get("currency")
        return ctx


class CurrencyListView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        store = get_store_currency()
        data = []
        for item in get_enabled_currencies():
            info = get_currency_data(item["code"])
            data.append({
                "code": item["code"],
                "name": info["name"],
                "symbol": info["symbol"],
                "rate": str(item["rate"]),
                "visible": item["visible"],
                "example": format_price(1234.5, item["code"]),
            })
        return Response({"store_currency": store, "currencies": data})


class ProductSyncView(views.APIView):
    """Run a product sync now and report the result."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request):
        result = sync_products()
        return Response({
            "success": not result["errors"],
            "synced": result["synced"],
            "errors": result["errors"],
            "message": f"Successfully synced {result['synced']} products.",
        })


class CurrencySyncView(views.APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request):
        result = sync_currencies()
        return Response({"success": not result["errors"], **result})
