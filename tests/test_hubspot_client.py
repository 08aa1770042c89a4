"""
Tests for the HubSpot REST client and the integration diagnostics
endpoints.
"""
from unittest import mock

import pytest
import requests

from integrations.hubspot import HubSpotAPIError, HubSpotAuthError, HubSpotClient, get_client, retry_after_seconds
from integrations.models import SyncLog


def make_response(status=200, payload=None, headers=None, text=None):
    resp = mock.Mock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.json.return_value = payload if payload is not None else {}
    resp.text = text if text is not None else ("{}" if payload is None else "x")
    return resp


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def api(session):
    return HubSpotClient("tok", base_url="https://api.test/", max_retries=3, session=session)


def test_requires_token(session):
    client = HubSpotClient("", session=session)
    with pytest.raises(HubSpotAuthError):
        client.get_product("1")
    session.request.assert_not_called()


def test_successful_request(api, session):
    session.request.return_value = make_response(payload={"id": "c-1"})

    assert api.create_contact("a@example.com", {"firstname": "A"}) == {"id": "c-1"}

    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "POST"
    assert kwargs["url"] == "https://api.test/crm/v3/objects/contacts"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["json"] == {"properties": {"email": "a@example.com", "firstname": "A"}}


def test_get_requests_send_no_body(api, session):
    session.request.return_value = make_response(payload={"results": []})

    api.get_products(limit=10, after="abc", currency_codes=["EUR", "gbp"])

    kwargs = session.request.call_args.kwargs
    assert kwargs["json"] is None
    assert kwargs["params"]["after"] == "abc"
    assert kwargs["params"]["limit"] == 10
    props = kwargs["params"]["properties"].split(",")
    assert "hs_price_eur" in props and "hs_price_gbp" in props and "hs_images" in props


def test_retries_after_rate_limit(api, session):
    session.request.side_effect = [
        make_response(429, headers={"Retry-After": "2"}),
        make_response(payload={"id": "1"}),
    ]
    with mock.patch("integrations.hubspot.time.sleep") as sleep:
        assert api.get_deal("1") == {"id": "1"}
    sleep.assert_called_once_with(2)
    assert session.request.call_count == 2


def test_rate_limit_on_last_attempt_raises(session):
    client = HubSpotClient("tok", max_retries=1, session=session)
    session.request.return_value = make_response(429, payload={"message": "Too many requests"})

    with pytest.raises(HubSpotAPIError) as exc:
        client.get_deal("1")
    assert exc.value.status == 429
    assert exc.value.message == "Too many requests"


def test_error_status_uses_hubspot_message(api, session):
    session.request.return_value = make_response(400, payload={"message": "Property values were not valid"})
    with pytest.raises(HubSpotAPIError) as exc:
        api.update_deal("1", {"amount": "x"})
    assert exc.value.status == 400
    assert exc.value.message == "Property values were not valid"

    session.request.return_value = make_response(500, text="")
    with pytest.raises(HubSpotAPIError) as exc:
        api.get_deal("1")
    assert exc.value.message == "API request failed"


def test_transport_errors_become_api_errors(api, session):
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(HubSpotAPIError):
        api.get_company_currency()


def test_line_item_payloads(api, session):
    session.request.return_value = make_response(payload={"results": []})

    api.create_line_item({"quantity": 1})
    assert session.request.call_args.kwargs["json"] == {"properties": {"quantity": 1}}

    api.batch_create_line_items([{"properties": {"quantity": 1}}])
    assert session.request.call_args.kwargs["json"] == {"inputs": [{"properties": {"quantity": 1}}]}

    api.associate_line_item_to_invoice("li-1", "inv-1")
    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "PUT"
    assert kwargs["url"].endswith("/crm/v3/objects/line_items/li-1/associations/invoices/inv-1/20")


def test_invoice_payment_link(api, session):
    session.request.return_value = make_response(payload={"properties": {"hs_payment_link": "https://pay"}})
    assert api.get_invoice_payment_link("inv-1") == "https://pay"

    session.request.return_value = make_response(payload={"properties": {}})
    assert api.get_invoice_payment_link("inv-1") == ""


def test_email_is_quoted_in_preference_urls(api, session):
    session.request.return_value = make_response(payload={})
    api.get_contact_subscription_statuses("a+b@example.com")
    assert session.request.call_args.kwargs["url"].endswith("/statuses/a%2Bb%40example.com")


def test_connection_check(api, session):
    session.request.return_value = make_response(payload={"results": []})
    assert api.test_connection() is True
    session.request.return_value = make_response(401, payload={"message": "Authentication credentials not found"})
    assert api.test_connection() is False


def test_get_client_reads_settings(settings):
    settings.HUBSPOT_ACCESS_TOKEN = "from-settings"
    settings.HUBSPOT_API_BASE = "https://example.test"
    client = get_client()
    assert client.token == "from-settings"
    assert client.base_url == "https://example.test"
    assert client.max_retries == settings.HUBSPOT_MAX_RETRIES


@pytest.mark.django_db
def test_diagnostics_endpoints(staff_client, auth_client, fake_hubspot):
    fake_hubspot.test_connection.return_value = True
    fake_hubspot.get_auth_status.return_value = {"mode": "private_app", "has_private_key": True, "portal_id": None}
    SyncLog.record(SyncLog.TYPE_PRODUCTS, synced=3)
    SyncLog.record(SyncLog.TYPE_CURRENCIES, errors=["boom"])

    assert auth_client.post("/api/integrations/test-connection/").status_code == 403

    resp = staff_client.post("/api/integrations/test-connection/")
    assert resp.json()["success"] is True
    assert staff_client.get("/api/integrations/auth-status/").json()["mode"] == "private_app"

    logs = staff_client.get("/api/integrations/sync-logs/", {"type": "currencies"}).json()
    assert logs["count"] == 1
    assert logs["results"][0]["status"] == SyncLog.STATUS_FAILED


@pytest.mark.parametrize(
    "header, expected",
    [(None, 10), ("", 10), ("3", 3), ("1.5", 2), ("-4", 0), ("soon", 10), ("Wed, 21 Oct 2015 07:28:00 GMT", 0)],
)
def test_retry_after_parsing(header, expected):
    assert retry_after_seconds(header) == expected


def test_non_integer_retry_after_still_retries(api, session):
    session.request.side_effect = [
        make_response(429, headers={"Retry-After": "0.5"}),
        make_response(429, headers={"Retry-After": "not-a-number"}),
        make_response(payload={"id": "1"}),
    ]
    with mock.patch("integrations.hubspot.time.sleep") as sleep:
        assert api.get_deal("1") == {"id": "1"}
    assert [c.args[0] for c in sleep.call_args_list] == [1, 10]
