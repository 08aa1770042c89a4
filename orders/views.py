# orders/views.py
from django.conf import settings
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.throttling import ActionRateThrottle
from products.currency import format_price
from users.customers import get_user_orders

from .cart import (
    CartError,
    add_to_cart,
    clear_cart,
    get_item_count,
    get_or_create_cart,
    get_total,
    remove_from_cart,
    update_cart_item,
)
from .checkout import CheckoutError, get_order, process_checkout
from .serializers import (
    AddToCartSerializer,
    CartItemSerializer,
    CheckoutRequestSerializer,
    OrderSerializer,
    UpdateCartItemSerializer,
)


def error_response(exc, http_status=status.HTTP_400_BAD_REQUEST):
    return Response({"detail": exc.message, "code": exc.code}, status=http_status)


class CartSessionMixin:
    """Resolve the cart from the session cookie and keep the cookie alive."""

    permission_classes = [permissions.AllowAny]

    def get_cart(self, request):
        cookie = request.COOKIES.get(settings.ECOMMERCE_CART_COOKIE_NAME)
        return get_or_create_cart(cookie, request.user)

    def cart_response(self, request, cart, data=None, http_status=status.HTTP_200_OK):
        total = get_total(cart)
        payload = {
            "cart_count": get_item_count(cart),
            "cart_total": str(total),
            "cart_total_formatted": format_price(total),
        }
        payload.update(data or {})
        response = Response(payload, status=http_status)
        response.set_cookie(
            settings.ECOMMERCE_CART_COOKIE_NAME,
            cart.session_id,
            max_age=settings.ECOMMERCE_CART_COOKIE_AGE,
            httponly=True,
            samesite="Lax",
            secure=request.is_secure(),
        )
        return response


class CartView(CartSessionMixin, APIView):
    def get(self, request):
        cart = self.get_cart(request)
        items = CartItemSerializer(cart.items.select_related("product"), many=True).data
        return self.cart_response(request, cart, {"items": items})


class CartCount(CartSessionMixin, APIView):
    def get(self, request):
        cart = self.get_cart(request)
        return Response({"count": get_item_count(cart)})


class CartItems(CartSessionMixin, APIView):
    throttle_classes = [ActionRateThrottle]
    throttle_scope = "add_to_cart"

    # add/increment
    def post(self, request):
        ser = AddToCartSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        cart = self.get_cart(request)
        try:
            item = add_to_cart(cart, ser.validated_data["product_id"], ser.validated_data["quantity"])
        except CartError as exc:
            return error_response(exc)
        return self.cart_response(
            request,
            cart,
            {"message": "Product added to cart", "item": CartItemSerializer(item).data},
            http_status=status.HTTP_201_CREATED,
        )


class CartItemDetail(CartSessionMixin, APIView):
    """Update or remove the cart line of a product."""

    throttle_classes = [ActionRateThrottle]
    throttle_scope = "add_to_cart"

    def get_throttles(self):
        if self.request.method == "DELETE":
            return []
        return super().get_throttles()

    def patch(self, request, product_id):
        ser = UpdateCartItemSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        cart = self.get_cart(request)
        if not update_cart_item(cart, product_id, ser.validated_data["quantity"]):
            return Response({"detail": "Failed to update cart", "code": "not_in_cart"},
                            status=status.HTTP_404_NOT_FOUND)
        return self.cart_response(request, cart, {"message": "Cart updated"})

    def delete(self, request, product_id):
        cart = self.get_cart(request)
        if not remove_from_cart(cart, product_id):
            return Response({"detail": "Failed to remove item", "code": "not_in_cart"},
                            status=status.HTTP_404_NOT_FOUND)
        return self.cart_response(request, cart, {"message": "Item removed from cart"})


class CartClear(CartSessionMixin, APIView):
    def post(self, request):
        cart = self.get_cart(request)
        cleared = get_item_count(cart)
        clear_cart(cart)
        return self.cart_response(request, cart, {"ok": True, "cleared": cleared})


class CheckoutView(CartSessionMixin, APIView):
    """
    POST /api/checkout/ -> turn the current cart into a HubSpot-backed order.
    Licensed stores get a HubSpot invoice payment link; free stores a deal.
    """
    throttle_classes = [ActionRateThrottle]
    throttle_scope = "checkout"

    def post(self, request):
        ser = CheckoutRequestSerializer(data=request.data)
        if not ser.is_valid():
            return Response(
                {"detail": "Please fill in all required fields", "code": "missing_fields", "errors": ser.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        customer, billing, subscription_ids = ser.split()
        cart = self.get_cart(request)
        try:
            result = process_checkout(
                cart, customer, billing, user=request.user, subscription_type_ids=subscription_ids
            )
        except CheckoutError as exc:
            return error_response(exc)

        result["message"] = result.get("message") or "Order placed successfully!"
        result["redirect_url"] = f"{settings.FRONTEND_URL}/order-confirmation/?order_id={result['order_id']}"
        return self.cart_response(request, cart, result, http_status=status.HTTP_201_CREATED)


class OrderList(APIView):
    """
    GET /api/orders/  -> list the customer's orders, newest first
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        qs = get_user_orders(request.user).prefetch_related("items")
        serializer = OrderSerializer(qs, many=True, context={"request": request})
        return Response(serializer.data)


class OrderDetail(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        try:
            order = get_order(pk, request.user)
        except CheckoutError as exc:
            http_status = status.HTTP_403_FORBIDDEN if exc.code == "forbidden" else status.HTTP_401_UNAUTHORIZED
            return error_response(exc, http_status)
        if order is None:
            return Response(status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order, context={"request": request}).data)
