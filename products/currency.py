"""
Currency handling for the storefront.

HubSpot accounts have one company currency and any number of additional
enabled currencies with exchange rates.  ``sync_currencies`` mirrors both
into the ``Currency`` table; ``format_price`` renders amounts with ISO 4217
formatting rules (symbol, decimals, separators and symbol position).
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction

from integrations.hubspot import HubSpotAPIError, get_client
from integrations.models import SyncLog

from .models import Currency
from .signals import currencies_synced

logger = logging.getLogger(__name__)


def _fmt(symbol, name, decimals=2, position="before", thousands=",", decimal="."):
    return {
        "symbol": symbol,
        "name": name,
        "decimals": decimals,
        "position": position,
        "thousands": thousands,
        "decimal": decimal,
    }


CURRENCY_DATA = {
    "USD": _fmt("$", "US Dollar"),
    "EUR": _fmt("€", "Euro", thousands=".", decimal=","),
    "GBP": _fmt("£", "British Pound"),
    "JPY": _fmt("¥", "Japanese Yen", decimals=0),
    "AUD": _fmt("$", "Australian Dollar"),
    "CAD": _fmt("$", "Canadian Dollar"),
    "CHF": _fmt("Fr", "Swiss Franc", thousands="'"),
    "CNY": _fmt("¥", "Chinese Yuan"),
    "SEK": _fmt("kr", "Swedish Krona", position="after", thousands=" ", decimal=","),
    "NZD": _fmt("$", "New Zealand Dollar"),
    "MXN": _fmt("$", "Mexican Peso"),
    "SGD": _fmt("$", "Singapore Dollar"),
    "HKD": _fmt("$", "Hong Kong Dollar"),
    "NOK": _fmt("kr", "Norwegian Krone", position="after", thousands=" ", decimal=","),
    "KRW": _fmt("₩", "South Korean Won", decimals=0),
    "TRY": _fmt("₺", "Turkish Lira", thousands=".", decimal=","),
    "RUB": _fmt("₽", "Russian Ruble", position="after", thousands=" ", decimal=","),
    "INR": _fmt("₹", "Indian Rupee"),
    "BRL": _fmt("R$", "Brazilian Real", thousands=".", decimal=","),
    "ZAR": _fmt("R", "South African Rand", thousands=" "),
    "DKK": _fmt("kr", "Danish Krone", position="after", thousands=".", decimal=","),
    "PLN": _fmt("zł", "Polish Zloty", position="after", thousands=" ", decimal=","),
    "THB": _fmt("฿", "Thai Baht"),
    "IDR": _fmt("Rp", "Indonesian Rupiah", decimals=0, thousands=".", decimal=","),
    "HUF": _fmt("Ft", "Hungarian Forint", decimals=0, position="after", thousands=" ", decimal=","),
    "CZK": _fmt("Kč", "Czech Koruna", position="after", thousands=" ", decimal=","),
    "ILS": _fmt("₪", "Israeli Shekel"),
    "CLP": _fmt("$", "Chilean Peso", decimals=0, thousands=".", decimal=","),
    "PHP": _fmt("₱", "Philippine Peso"),
    "AED": _fmt("د.إ", "UAE Dirham"),
    "COP": _fmt("$", "Colombian Peso", decimals=0, thousands=".", decimal=","),
    "SAR": _fmt("﷼", "Saudi Riyal"),
    "MYR": _fmt("RM", "Malaysian Ringgit"),
    "RON": _fmt("lei", "Romanian Leu", position="after", thousands=".", decimal=","),
}

DEFAULT_CURRENCIES = ("USD", "EUR", "GBP", "JPY")


def get_currency_data(code: str) -> dict:
    """Formatting rules for ``code``; unknown codes use the code itself as prefix."""
    code = (code or "").upper()
    if code in CURRENCY_DATA:
        return CURRENCY_DATA[code]
    return _fmt(f"{code} ", code)


def get_store_currency() -> str:
    """The HubSpot company currency once synced, else ``ECOMMERCE_CURRENCY``."""
    code = (
        Currency.objects.filter(is_company_currency=True)
        .values_list("code", flat=True)
        .first()
    )
    return code or getattr(settings, "ECOMMERCE_CURRENCY", "USD")


def get_currency_symbol(code: str | None = None) -> str:
    return get_currency_data(code or get_store_currency())["symbol"]


def format_price(amount, currency_code: str | None = None) -> str:
    """Render ``amount`` in ``currency_code`` (store currency by default)."""
    data = get_currency_data(currency_code or get_store_currency())
    decimals = data["decimals"]

    try:
        value = Decimal(str(amount if amount is not None else 0))
    except InvalidOperation:
        value = Decimal("0")
    value = value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)

    integer, _, fraction = f"{abs(value):,.{decimals}f}".partition(".")
    number = integer.replace(",", data["thousands"])
    if decimals:
        number = f"{number}{data['decimal']}{fraction}"
    if value < 0:
        number = f"-{number}"

    if data["position"] == "before":
        return f"{data['symbol']}{number}"
    return f"{number} {data['symbol']}"


def get_enabled_currencies() -> list[dict]:
    """Enabled currencies as ``{"code", "rate", "visible"}`` dicts."""
    rows = list(Currency.objects.all())
    if not rows:
        return [{"code": code, "rate": Decimal("1"), "visible": True} for code in DEFAULT_CURRENCIES]
    return [
        {"code": row.code, "rate": row.conversion_rate, "visible": row.visible}
        for row in rows
    ]


def sync_currencies(client=None) -> dict:
    """Mirror the company currency and enabled exchange rates from HubSpot."""
    client = client or get_client()
    results = {"company_currency": None, "enabled_currencies": [], "errors": []}

    try:
        company = client.get_company_currency()
    except HubSpotAPIError as exc:
        logger.error("Failed to get company currency: %s", exc.message)
        results["errors"].append(f"Failed to get company currency: {exc.message}")
    else:
        results["company_currency"] = (company.get("currencyCode") or "").upper() or None

    rates = None
    try:
        rates = client.get_account_currencies()
    except HubSpotAPIError as exc:
        logger.error("Failed to get account currencies: %s", exc.message)
        results["errors"].append(f"Failed to get account currencies: {exc.message}")
    else:
        for row in rates.get("results") or []:
            if not row.get("fromCurrencyCode"):
                continue
            results["enabled_currencies"].append({
                "code": row["fromCurrencyCode"].upper(),
                "rate": row.get("conversionRate", 1),
                "visible": row.get("visibleInUI", True),
            })

    with transaction.atomic():
        company_code = results["company_currency"]
        if company_code:
            Currency.objects.exclude(code=company_code).update(is_company_currency=False)
            Currency.objects.update_or_create(
                code=company_code,
                defaults={"is_company_currency": True, "conversion_rate": Decimal("1"), "visible": True},
            )

        if rates is not None:
            keep = {c["code"] for c in results["enabled_currencies"]}
            for item in results["enabled_currencies"]:
                Currency.objects.update_or_create(
                    code=item["code"],
                    defaults={
                        "conversion_rate": Decimal(str(item["rate"])),
                        "visible": bool(item["visible"]),
                    },
                )
            Currency.objects.exclude(code__in=keep).filter(is_company_currency=False).delete()

    SyncLog.record(
        SyncLog.TYPE_CURRENCIES,
        synced=len(results["enabled_currencies"]),
        errors=results["errors"],
        summary=f"company={results['company_currency'] or '-'}",
    )
    currencies_synced.send(sender=Currency, results=results)
    return results
