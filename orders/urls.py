from django.urls import path

from .views import CartClear, CartCount, CartItemDetail, CartItems, CartView, CheckoutView, OrderDetail, OrderList

urlpatterns = [
    path("cart/", CartView.as_view(), name="cart"),
    path("cart/count/", CartCount.as_view(), name="cart-count"),
    path("cart/items/", CartItems.as_view(), name="cart-items"),
    path("cart/items/<int:product_id>/", CartItemDetail.as_view(), name="cart-item-detail"),
    path("cart/clear/", CartClear.as_view(), name="cart-clear"),
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("orders/", OrderList.as_view(), name="order-list"),
    path("orders/<int:pk>/", OrderDetail.as_view(), name="order-detail"),
]
