"""
Tests for currency formatting and the HubSpot currency sync.
"""
from decimal import Decimal

import pytest

from integrations.hubspot import HubSpotAPIError
from integrations.models import SyncLog
from products.currency import (
    format_price,
    get_currency_data,
    get_currency_symbol,
    get_enabled_currencies,
    get_store_currency,
    sync_currencies,
)
from products.models import Currency


@pytest.mark.parametrize(
    "amount, code, expected",
    [
        (1234.5, "USD", "$1,234.50"),
        ("1234.5", "EUR", "€1.234,50"),
        (Decimal("1234.5"), "SEK", "1 234,50 kr"),
        (1234.5, "JPY", "¥1,235"),
        (0, "GBP", "£0.00"),
        (-5, "USD", "$-5.00"),
        (1000000, "CHF", "Fr1'000'000.00"),
        (12, "XYZ", "XYZ 12.00"),
        (None, "USD", "$0.00"),
        ("garbage", "USD", "$0.00"),
    ],
)
def test_format_price(db, amount, code, expected):
    assert format_price(amount, code) == expected


def test_unknown_currency_data():
    data = get_currency_data("xyz")
    assert data["symbol"] == "XYZ "
    assert data["decimals"] == 2


@pytest.mark.django_db
def test_store_currency_prefers_company_currency(settings):
    settings.ECOMMERCE_CURRENCY = "GBP"
    assert get_store_currency() == "GBP"
    assert get_currency_symbol() == "£"
    assert format_price(3) == "£3.00"

    Currency.objects.create(code="EUR", is_company_currency=True)
    assert get_store_currency() == "EUR"


@pytest.mark.django_db
def test_enabled_currencies_default_until_synced():
    assert [c["code"] for c in get_enabled_currencies()] == ["USD", "EUR", "GBP", "JPY"]
    Currency.objects.create(code="CAD", conversion_rate=Decimal("1.35"))
    assert get_enabled_currencies() == [{"code": "CAD", "rate": Decimal("1.35000000"), "visible": True}]


@pytest.mark.django_db
def test_sync_currencies(fake_hubspot):
    Currency.objects.create(code="JPY")
    fake_hubspot.get_company_currency.return_value = {"currencyCode": "eur"}
    fake_hubspot.get_account_currencies.return_value = {
        "results": [
            {"fromCurrencyCode": "usd", "conversionRate": 1.1, "visibleInUI": True},
            {"fromCurrencyCode": "GBP", "conversionRate": "0.85", "visibleInUI": False},
            {"conversionRate": 2},
        ]
    }

    result = sync_currencies()

    assert result["company_currency"] == "EUR"
    assert [c["code"] for c in result["enabled_currencies"]] == ["USD", "GBP"]
    assert result["errors"] == []
    assert set(Currency.objects.values_list("code", flat=True)) == {"EUR", "USD", "GBP"}
    assert get_store_currency() == "EUR"
    gbp = Currency.objects.get(code="GBP")
    assert gbp.conversion_rate == Decimal("0.85")
    assert gbp.visible is False
    assert SyncLog.objects.get(sync_type=SyncLog.TYPE_CURRENCIES).status == SyncLog.STATUS_SUCCESS


@pytest.mark.django_db
def test_sync_currencies_keeps_rows_when_rates_fail(fake_hubspot):
    Currency.objects.create(code="USD")
    fake_hubspot.get_company_currency.return_value = {"currencyCode": "USD"}
    fake_hubspot.get_account_currencies.side_effect = HubSpotAPIError("Forbidden", status=403)

    result = sync_currencies()

    assert result["company_currency"] == "USD"
    assert result["errors"] == ["Failed to get account currencies: Forbidden"]
    assert Currency.objects.get(code="USD").is_company_currency is True
