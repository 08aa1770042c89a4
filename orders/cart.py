"""
Cart service.

A cart belongs to a browser session identified by a 32 character hex
cookie.  Prices are snapshotted in the store currency when a product is
first added; later adds only bump the quantity.
"""
from __future__ import annotations

import re
import secrets
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Sum

from products.models import Product
from products.sync import get_product_price

from .models import Cart, CartItem
from .signals import cart_cleared, cart_item_added, cart_item_removed, cart_item_updated

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


class CartError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def generate_session_id() -> str:
    return secrets.token_hex(16)


def clean_session_id(raw: str | None) -> str | None:
    """Strip non-alphanumerics; anything not 32 chars long is rejected."""
    if not raw:
        return None
    value = _NON_ALNUM.sub("", raw)
    return value if len(value) == 32 else None


def get_or_create_cart(session_id: str | None, user=None) -> Cart:
    """Cart for the cookie value, creating a fresh session when it is missing or malformed."""
    session_id = clean_session_id(session_id) or generate_session_id()
    cart, _ = Cart.objects.get_or_create(session_id=session_id)
    if user is not None and user.is_authenticated and cart.user_id != user.pk:
        cart.user = user
        cart.save(update_fields=["user", "updated_at"])
    return cart


def add_to_cart(cart: Cart, product_id, quantity: int = 1) -> CartItem:
    if quantity < 1:
        raise CartError("invalid_quantity", "Quantity must be at least 1")

    product = Product.objects.filter(pk=product_id, status=Product.STATUS_ACTIVE).first()
    if product is None or not product.hubspot_product_id:
        raise CartError("invalid_product", "Invalid product")

    with transaction.atomic():
        item, created = CartItem.objects.select_for_update().get_or_create(
            cart=cart,
            product=product,
            defaults={
                "hubspot_product_id": product.hubspot_product_id,
                "quantity": quantity,
                "price": get_product_price(product),
            },
        )
        if not created:
            item.quantity = F("quantity") + quantity
            item.save(update_fields=["quantity", "updated_at"])
            item.refresh_from_db()

    cart_item_added.send(sender=Cart, cart=cart, product_id=product.pk, quantity=quantity)
    return item


def update_cart_item(cart: Cart, product_id, quantity: int) -> bool:
    """Set the quantity of a line. Returns False when the product is not in the cart."""
    item = cart.items.filter(product_id=product_id).first()
    if item is None:
        return False
    if quantity <= 0:
        return remove_from_cart(cart, product_id)

    item.quantity = quantity
    item.save(update_fields=["quantity", "updated_at"])
    cart_item_updated.send(sender=Cart, cart=cart, product_id=item.product_id, quantity=quantity)
    return True


def remove_from_cart(cart: Cart, product_id) -> bool:
    deleted, _ = cart.items.filter(product_id=product_id).delete()
    if not deleted:
        return False
    cart_item_removed.send(sender=Cart, cart=cart, product_id=product_id)
    return True


def clear_cart(cart: Cart) -> bool:
    cart.items.all().delete()
    cart_cleared.send(sender=Cart, cart=cart)
    return True


def get_items_with_products(cart: Cart) -> list[dict]:
    return [
        {"item": item, "product": item.product, "subtotal": item.subtotal}
        for item in cart.items.select_related("product")
    ]


def get_item_count(cart: Cart) -> int:
    return cart.items.aggregate(n=Sum("quantity"))["n"] or 0


def get_total(cart: Cart) -> Decimal:
    return sum((item.subtotal for item in cart.items.all()), Decimal("0.00"))


def get_subtotal(cart: Cart) -> Decimal:
    return get_total(cart)
