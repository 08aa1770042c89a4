"""
Tests for the HubSpot product sync and the public catalogue endpoints.
"""
from decimal import Decimal

import pytest

from integrations.hubspot import HubSpotAPIError
from integrations.models import SyncLog
from products.models import Product, ProductPrice
from products.signals import products_synced
from products.sync import (
    ProductSyncError,
    get_product_price,
    get_product_prices_all_currencies,
    has_currency_price,
    is_allowed_image_url,
    parse_image_urls,
    sync_products,
    sync_single_product,
)


def hubspot_product(pid, name="Widget", price="10.00", archived=False, **props):
    return {
        "id": pid,
        "archived": archived,
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-02-01T00:00:00Z",
        "properties": {"name": name, "price": price, **props},
    }


@pytest.mark.parametrize(
    "url, allowed",
    [
        ("https://f.hubspot.net/hub/1/a.png", True),
        ("https://hs-fs.hubspot.net/x.jpg", True),
        ("https://cdn2.hubspot.com/b.png", True),
        ("http://f.hubspot.net/a.png", False),
        ("https://evilhubspot.net/a.png", False),
        ("https://hubspot.net.evil.com/a.png", False),
        ("javascript:alert(1)", False),
    ],
)
def test_image_host_allow_list(url, allowed):
    assert is_allowed_image_url(url) is allowed


def test_parse_image_urls_drops_foreign_hosts():
    raw = "https://f.hubspot.net/a.png; http://evil.com/x.png ;https://cdn2.hubspot.net/b.png"
    assert parse_image_urls(raw) == ["https://f.hubspot.net/a.png", "https://cdn2.hubspot.net/b.png"]


@pytest.mark.django_db
def test_sync_single_product_maps_properties():
    product = sync_single_product(hubspot_product(
        "101",
        name="<b>Fancy</b> Widget",
        description="<p>Nice <i>thing</i></p>",
        hs_sku="FW-1",
        hs_cost_of_goods_sold="4.25",
        hs_recurring_billing_period="P12M",
        recurringbillingfrequency="monthly",
        hs_images="https://f.hubspot.net/a.png;http://evil.com/b.png",
        hs_price_eur="9.50",
    ))

    assert product.hubspot_product_id == "101"
    assert product.name == "Fancy Widget"
    assert product.description == "Nice thing"
    assert product.price == Decimal("10.00")
    assert product.sku == "FW-1"
    assert product.cost_of_goods == Decimal("4.25")
    assert product.is_subscription is True
    assert product.recurring_billing_period == "P12M"
    assert product.images == ["https://f.hubspot.net/a.png"]
    assert product.featured_image == "https://f.hubspot.net/a.png"
    assert product.status == Product.STATUS_ACTIVE
    assert product.hubspot_data["properties"]["name"] == "Fancy Widget"
    assert list(product.prices.values_list("currency", "amount")) == [("EUR", Decimal("9.50"))]


@pytest.mark.django_db
def test_resync_updates_and_drops_stale_prices():
    product = sync_single_product(hubspot_product("101", hs_price_gbp="8.00"))
    assert has_currency_price(product, "gbp")

    product = sync_single_product(hubspot_product("101", name="Renamed", price="12", archived=True))

    assert Product.objects.count() == 1
    assert product.name == "Renamed"
    assert product.price == Decimal("12")
    assert product.status == Product.STATUS_ARCHIVED
    assert not ProductPrice.objects.exists()


@pytest.mark.django_db
def test_sync_single_product_requires_id():
    with pytest.raises(ProductSyncError):
        sync_single_product({"properties": {"name": "No id"}})


@pytest.mark.django_db
def test_sync_products_pages_through_results(fake_hubspot, signal_spy):
    handler = signal_spy(products_synced)
    fake_hubspot.get_products.side_effect = [
        {"results": [hubspot_product("1"), hubspot_product("2")], "paging": {"next": {"after": "abc"}}},
        {"results": [hubspot_product("3"), {"properties": {}}]},
    ]

    result = sync_products()

    assert result["synced"] == 3
    assert result["errors"] == ["HubSpot product has no id"]
    second_call = fake_hubspot.get_products.call_args_list[1]
    assert second_call.kwargs["after"] == "abc"
    assert second_call.kwargs["currency_codes"] == ["USD", "EUR", "GBP", "JPY"]
    log = SyncLog.objects.get(sync_type=SyncLog.TYPE_PRODUCTS)
    assert log.status == SyncLog.STATUS_PARTIAL
    assert log.synced_count == 3
    handler.assert_called_once()


@pytest.mark.django_db
def test_sync_products_stops_on_api_error(fake_hubspot):
    fake_hubspot.get_products.side_effect = HubSpotAPIError("Unauthorized", status=401)

    result = sync_products()

    assert result == {"synced": 0, "errors": ["Unauthorized"]}
    assert SyncLog.objects.get().status == SyncLog.STATUS_FAILED


@pytest.mark.django_db
def test_prices_per_currency(product):
    ProductPrice.objects.create(product=product, currency="EUR", amount=Decimal("9.00"))

    assert get_product_price(product) == Decimal("10.00")
    assert get_product_price(product, "eur") == Decimal("9.00")
    assert get_product_price(product, "GBP") == Decimal("10.00")
    assert get_product_prices_all_currencies(product) == {"USD": Decimal("10.00"), "EUR": Decimal("9.00")}


@pytest.mark.django_db
def test_catalogue_lists_active_products(client, product, second_product):
    Product.objects.create(hubspot_product_id="old", name="Old", status=Product.STATUS_ARCHIVED)

    resp = client.get("/api/products/")

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert {p["name"] for p in body["results"]} == {"Widget", "Gadget"}
    widget = next(p for p in body["results"] if p["name"] == "Widget")
    assert widget["formatted_price"] == "$10.00"


@pytest.mark.django_db
def test_catalogue_currency_and_search(client, product, second_product):
    ProductPrice.objects.create(product=product, currency="EUR", amount=Decimal("1234.50"))

    resp = client.get("/api/products/", {"currency": "eur", "search": "widg"})

    results = resp.json()["results"]
    assert len(results) == 1
    assert results[0]["currency"] == "EUR"
    assert results[0]["display_price"] == "1234.50"
    assert results[0]["formatted_price"] == "€1.234,50"
    assert results[0]["prices"] == {"EUR": "1234.50"}

    detail = client.get(f"/api/products/{product.pk}/")
    assert detail.status_code == 200
    assert detail.json()["sku"] == "W-1"


@pytest.mark.django_db
def test_manual_sync_is_staff_only(client, staff_client, fake_hubspot):
    fake_hubspot.get_products.return_value = {"results": [hubspot_product("55")]}

    assert client.post("/api/products/sync/").status_code == 401

    resp = staff_client.post("/api/products/sync/")
    assert resp.status_code == 200
    assert resp.json()["synced"] == 1
    assert Product.objects.filter(hubspot_product_id="55").exists()
