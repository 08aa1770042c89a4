"""
Product synchronization from HubSpot.

``sync_products`` walks the HubSpot product library page by page and
upserts each product via ``sync_single_product``.  Currency-specific prices
(``hs_price_<code>``) are stored as ``ProductPrice`` rows for every enabled
currency; image URLs are kept only when they point at a HubSpot host over
HTTPS.  Each run is recorded in ``integrations.SyncLog``.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse

from django.db import transaction
from django.utils.html import strip_tags

from integrations.hubspot import HubSpotAPIError, get_client
from integrations.models import SyncLog

from .currency import get_enabled_currencies, get_store_currency
from .models import Product, ProductPrice
from .signals import product_synced, products_synced

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
ALLOWED_IMAGE_HOSTS = ("hs-fs.hubspot.net", "hubspot.com", "hubspot.net")


class ProductSyncError(Exception):
    """Raised when a single HubSpot product cannot be stored."""


def _text(value) -> str:
    return strip_tags(str(value or "")).strip()


def _decimal(value) -> Decimal:
    try:
        return Decimal(str(value)) if value not in (None, "") else Decimal("0")
    except InvalidOperation:
        return Decimal("0")


def is_allowed_image_url(url: str) -> bool:
    parsed = urlparse(url)
    if parsed.scheme != "https" or not parsed.hostname:
        return False
    host = parsed.hostname.lower()
    return any(host == allowed or host.endswith(f".{allowed}") for allowed in ALLOWED_IMAGE_HOSTS)


def parse_image_urls(raw: str) -> list[str]:
    """``hs_images`` is a ``;`` separated list; drop anything not served by HubSpot."""
    urls = [u.strip() for u in (raw or "").split(";") if u.strip()]
    kept = [u for u in urls if is_allowed_image_url(u)]
    if len(kept) != len(urls):
        logger.warning("Dropped %d product image URL(s) not hosted by HubSpot", len(urls) - len(kept))
    return kept


def _snapshot(hubspot_product: dict, properties: dict) -> dict:
    return {
        "id": _text(hubspot_product.get("id")),
        "created_at": _text(hubspot_product.get("createdAt")),
        "updated_at": _text(hubspot_product.get("updatedAt")),
        "archived": bool(hubspot_product.get("archived", False)),
        "properties": {
            "name": _text(properties.get("name")),
            "description": _text(properties.get("description")),
            "price": str(_decimal(properties.get("price"))),
            "hs_sku": _text(properties.get("hs_sku")),
            "hs_cost_of_goods_sold": str(_decimal(properties.get("hs_cost_of_goods_sold"))),
            "hs_product_type": _text(properties.get("hs_product_type")),
            "hs_recurring_billing_period": _text(properties.get("hs_recurring_billing_period")),
            "recurringbillingfrequency": _text(properties.get("recurringbillingfrequency")),
            "hs_billing_period_units": _text(properties.get("hs_billing_period_units")),
        },
    }


@transaction.atomic
def sync_single_product(hubspot_product: dict) -> Product:
    """Create or update the local product for one HubSpot product record."""
    hubspot_id = str(hubspot_product.get("id") or "").strip()
    if not hubspot_id:
        raise ProductSyncError("HubSpot product has no id")
    properties = hubspot_product.get("properties") or {}

    defaults = {
        "name": _text(properties.get("name"))[:255],
        "description": _text(properties.get("description")),
        "price": _decimal(properties.get("price")),
        "sku": _text(properties.get("hs_sku"))[:100],
        "cost_of_goods": _decimal(properties.get("hs_cost_of_goods_sold")),
        "product_type": _text(properties.get("hs_product_type")) or "simple",
        "hubspot_data": _snapshot(hubspot_product, properties),
        "status": Product.STATUS_ARCHIVED if hubspot_product.get("archived") else Product.STATUS_ACTIVE,
    }

    billing_period = _text(properties.get("hs_recurring_billing_period"))
    if billing_period:
        defaults.update(
            is_subscription=True,
            recurring_billing_period=billing_period,
            recurring_billing_frequency=_text(properties.get("recurringbillingfrequency")),
            billing_period_units=_text(properties.get("hs_billing_period_units")),
        )
    else:
        defaults["is_subscription"] = False

    if properties.get("hs_images"):
        defaults["images"] = parse_image_urls(properties["hs_images"])

    product, created = Product.objects.update_or_create(hubspot_product_id=hubspot_id, defaults=defaults)

    for currency in get_enabled_currencies():
        code = currency["code"].upper()
        value = properties.get(f"hs_price_{code.lower()}")
        if value not in (None, "") and _decimal(value):
            ProductPrice.objects.update_or_create(
                product=product, currency=code, defaults={"amount": _decimal(value)}
            )
        else:
            ProductPrice.objects.filter(product=product, currency=code).delete()

    logger.debug("%s product %s", "Created" if created else "Updated", hubspot_id)
    product_synced.send(sender=Product, product=product, hubspot_product=hubspot_product)
    return product


def sync_products(client=None) -> dict:
    """Pull every product from HubSpot. Stops paging at the first API error."""
    client = client or get_client()
    currency_codes = [c["code"] for c in get_enabled_currencies()]
    synced = 0
    errors: list[str] = []
    after = None

    while True:
        try:
            response = client.get_products(limit=PAGE_SIZE, after=after, currency_codes=currency_codes)
        except HubSpotAPIError as exc:
            logger.error("Product sync aborted: %s", exc.message)
            errors.append(exc.message)
            break

        results = response.get("results")
        if not isinstance(results, list):
            break

        for hubspot_product in results:
            try:
                sync_single_product(hubspot_product)
            except ProductSyncError as exc:
                errors.append(str(exc))
            else:
                synced += 1

        after = ((response.get("paging") or {}).get("next") or {}).get("after")
        if not after:
            break

    logger.info("Synced %d products from HubSpot (%d errors)", synced, len(errors))
    SyncLog.record(SyncLog.TYPE_PRODUCTS, synced=synced, errors=errors, summary=f"{synced} products")
    products_synced.send(sender=Product, synced=synced, errors=errors)
    return {"synced": synced, "errors": errors}


# ---------------------------------------------------------------------------
# pricing
# ---------------------------------------------------------------------------

def get_product_price(product: Product, currency_code: str | None = None) -> Decimal:
    """Currency-specific price when HubSpot has one, else the base price."""
    code = (currency_code or get_store_currency()).upper()
    price = product.prices.filter(currency=code).values_list("amount", flat=True).first()
    if price:
        return price
    return product.price


def get_product_prices_all_currencies(product: Product) -> dict:
    prices = {get_store_currency().upper(): product.price}
    enabled = {c["code"].upper() for c in get_enabled_currencies()}
    for row in product.prices.all():
        if row.currency in enabled and row.amount:
            prices[row.currency] = row.amount
    return prices


def has_currency_price(product: Product, currency_code: str) -> bool:
    return product.prices.filter(currency=currency_code.upper(), amount__gt=0).exists()
