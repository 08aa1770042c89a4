"""
HubSpot REST API client.

A thin wrapper around ``requests`` that authenticates with a private-app
bearer token and exposes the CRM, settings and communication-preferences
endpoints the storefront relies on: products, currencies, contacts, deals,
line items, associations, commerce subscriptions, email subscription types
and invoices.

Every failed call raises :class:`HubSpotAPIError`; callers decide whether
a failure aborts their operation or is merely logged.
"""
from __future__ import annotations

import logging
import math
import time
from typing import Any
from urllib.parse import quote

import requests
from django.conf import settings
from django.utils.http import parse_http_date

logger = logging.getLogger(__name__)

# HubSpot-defined association type ids
ASSOC_DEAL_TO_CONTACT = 3
ASSOC_LINE_ITEM_TO_DEAL = 19
ASSOC_LINE_ITEM_TO_INVOICE = 20
ASSOC_INVOICE_TO_CONTACT = 208

DEFAULT_RETRY_AFTER = 10


def retry_after_seconds(value) -> int:
    """Seconds to wait for a ``Retry-After`` header given as seconds or an HTTP date."""
    if value in (None, ""):
        return DEFAULT_RETRY_AFTER
    try:
        return max(0, math.ceil(float(value)))
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return max(0, math.ceil(parse_http_date(str(value)) - time.time()))
    except ValueError:
        logger.warning("Unparseable Retry-After header %r", value)
        return DEFAULT_RETRY_AFTER


PRODUCT_PROPERTIES = [
    "name",
    "description",
    "price",
    "hs_sku",
    "hs_cost_of_goods_sold",
    "hs_images",
    "hs_url",
    "createdate",
    "hs_product_type",
    "hs_recurring_billing_period",
    "recurringbillingfrequency",
    "hs_billing_period_units",
    "hs_recurring_billing_start_date",
]


class HubSpotAPIError(Exception):
    """Raised when a HubSpot request fails or returns an error status."""

    def __init__(self, message: str, status: int | None = None, response: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.response = response


class HubSpotAuthError(HubSpotAPIError):
    """Raised when no HubSpot credentials are configured."""


class HubSpotClient:
    """Private-app token client for the HubSpot v3/v4 APIs."""

    BASE_URL = "https://api.hubapi.com"

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        timeout: int = 30,
        max_retries: int = 3,
        session: requests.Session | None = None,
    ):
        self.token = access_token or ""
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, endpoint: str, data: dict | None = None, params: dict | None = None) -> dict:
        """Make an API request, honouring ``Retry-After`` on 429 responses."""
        if not self.token:
            raise HubSpotAuthError(
                "HubSpot authentication not configured. Add a Private App token."
            )

        url = f"{self.base_url}{endpoint}"
        body = data if method in ("POST", "PUT", "PATCH") else None

        for attempt in range(self.max_retries):
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    headers=self.headers,
                    json=body,
                    params=params,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                logger.error("HubSpot %s %s failed: %s", method, endpoint, exc)
                raise HubSpotAPIError(str(exc)) from exc

            if response.status_code == 429 and attempt < self.max_retries - 1:
                retry_after = retry_after_seconds(response.headers.get("Retry-After"))
                logger.warning("HubSpot rate limited, waiting %ss...", retry_after)
                time.sleep(retry_after)
                continue
            break

        decoded = self._decode(response)
        if response.status_code >= 400:
            message = "API request failed"
            if isinstance(decoded, dict) and decoded.get("message"):
                message = decoded["message"]
            raise HubSpotAPIError(message, status=response.status_code, response=decoded)
        return decoded

    @staticmethod
    def _decode(response) -> dict:
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    # ------------------------------------------------------------------
    # products
    # ------------------------------------------------------------------

    def get_products(self, limit: int = 100, after: str | None = None, currency_codes=None) -> dict:
        """List products including the ``hs_price_<code>`` property of each currency."""
        properties = list(PRODUCT_PROPERTIES)
        for code in currency_codes or []:
            properties.append(f"hs_price_{code.lower()}")
        params = {"limit": limit, "properties": ",".join(properties)}
        if after:
            params["after"] = after
        return self._request("GET", "/crm/v3/objects/products", params=params)

    def get_product(self, product_id: str) -> dict:
        return self._request("GET", f"/crm/v3/objects/products/{product_id}")

    # ------------------------------------------------------------------
    # currencies
    # ------------------------------------------------------------------

    def get_company_currency(self) -> dict:
        return self._request("GET", "/settings/v3/currencies/company-currency")

    def get_account_currencies(self) -> dict:
        """Enabled currencies with their current exchange rates."""
        return self._request("GET", "/settings/v3/currencies/exchange-rates/current")

    def get_supported_currency_codes(self) -> dict:
        return self._request("GET", "/settings/v3/currencies/codes")

    # ------------------------------------------------------------------
    # contacts
    # ------------------------------------------------------------------

    def create_contact(self, email: str, properties: dict | None = None) -> dict:
        data = {"properties": {"email": email, **(properties or {})}}
        return self._request("POST", "/crm/v3/objects/contacts", data)

    def update_contact(self, contact_id: str, properties: dict | None = None) -> dict:
        return self._request("PATCH", f"/crm/v3/objects/contacts/{contact_id}", {"properties": properties or {}})

    def search_contact_by_email(self, email: str) -> dict:
        data = {
            "filterGroups": [{
                "filters": [{
                    "propertyName": "email",
                    "operator": "EQ",
                    "value": email,
                }]
            }]
        }
        return self._request("POST", "/crm/v3/objects/contacts/search", data)

    # ------------------------------------------------------------------
    # deals, line items and associations
    # ------------------------------------------------------------------

    def create_deal(self, properties: dict, associations: list | None = None) -> dict:
        data: dict = {"properties": properties}
        if associations:
            data["associations"] = associations
        return self._request("POST", "/crm/v3/objects/deals", data)

    def get_deal(self, deal_id: str) -> dict:
        return self._request("GET", f"/crm/v3/objects/deals/{deal_id}")

    def update_deal(self, deal_id: str, properties: dict) -> dict:
        return self._request("PATCH", f"/crm/v3/objects/deals/{deal_id}", {"properties": properties})

    def create_line_item(self, properties: dict) -> dict:
        return self._request("POST", "/crm/v3/objects/line_items", {"properties": properties})

    def batch_create_line_items(self, line_items: list) -> dict:
        return self._request("POST", "/crm/v3/objects/line_items/batch/create", {"inputs": line_items})

    def create_association(self, from_type: str, from_id, to_type: str, to_id, association_type) -> dict:
        endpoint = f"/crm/v3/objects/{from_type}/{from_id}/associations/{to_type}/{to_id}/{association_type}"
        return self._request("PUT", endpoint)

    # ------------------------------------------------------------------
    # commerce subscriptions
    # ------------------------------------------------------------------

    def get_commerce_subscriptions(self, limit: int = 100, after: str | None = None) -> dict:
        params = {"limit": limit}
        if after:
            params["after"] = after
        return self._request("GET", "/crm/v3/objects/subscriptions", params=params)

    def get_commerce_subscription(self, subscription_id: str) -> dict:
        return self._request("GET", f"/crm/v3/objects/subscriptions/{subscription_id}")

    def create_commerce_subscription(self, properties: dict, associations: list | None = None) -> dict:
        data: dict = {"properties": properties}
        if associations:
            data["associations"] = associations
        return self._request("POST", "/crm/v3/objects/subscriptions", data)

    def update_commerce_subscription(self, subscription_id: str, properties: dict) -> dict:
        return self._request("PATCH", f"/crm/v3/objects/subscriptions/{subscription_id}", {"properties": properties})

    def get_contact_subscriptions(self, contact_id: str) -> dict:
        return self._request("GET", f"/crm/v3/objects/contacts/{contact_id}/associations/subscriptions")

    # ------------------------------------------------------------------
    # marketing email subscription types (communication preferences v4)
    # ------------------------------------------------------------------

    def get_subscription_type_definitions(self, business_unit_id: str | None = None) -> dict:
        params = {"businessUnitId": business_unit_id} if business_unit_id else None
        return self._request("GET", "/communication-preferences/v4/definitions", params=params)

    def get_contact_subscription_statuses(self, email_or_id: str) -> dict:
        return self._request("GET", f"/communication-preferences/v4/statuses/{quote(str(email_or_id))}")

    def subscribe_contact(self, email_or_id: str, subscription_id, legal_basis: str, legal_basis_explanation: str = "") -> dict:
        data = {
            "subscriptionId": subscription_id,
            "legalBasis": legal_basis,
            "legalBasisExplanation": legal_basis_explanation,
        }
        return self._request("POST", f"/communication-preferences/v4/statuses/{quote(str(email_or_id))}/subscribe", data)

    def unsubscribe_contact(self, email_or_id: str, subscription_id) -> dict:
        data = {"subscriptionId": subscription_id}
        return self._request("POST", f"/communication-preferences/v4/statuses/{quote(str(email_or_id))}/unsubscribe", data)

    def unsubscribe_contact_from_all(self, email_or_id: str) -> dict:
        return self._request("POST", f"/communication-preferences/v4/statuses/{quote(str(email_or_id))}/unsubscribe-all", {})

    # ------------------------------------------------------------------
    # invoices
    # ------------------------------------------------------------------

    def create_invoice(self, invoice_data: dict) -> dict:
        return self._request("POST", "/crm/v3/objects/invoices", invoice_data)

    def update_invoice(self, invoice_id: str, updates: dict) -> dict:
        return self._request("PATCH", f"/crm/v3/objects/invoices/{invoice_id}", updates)

    def get_invoice(self, invoice_id: str) -> dict:
        params = {"properties": "hs_invoice_status,hs_payment_link,hs_currency,hs_amount_billed"}
        return self._request("GET", f"/crm/v3/objects/invoices/{invoice_id}", params=params)

    def get_invoice_payment_link(self, invoice_id: str) -> str:
        invoice = self.get_invoice(invoice_id)
        return (invoice.get("properties") or {}).get("hs_payment_link") or ""

    def associate_invoice_to_contact(self, invoice_id: str, contact_id: str) -> dict:
        return self.create_association("invoices", invoice_id, "contacts", contact_id, ASSOC_INVOICE_TO_CONTACT)

    def associate_line_item_to_invoice(self, line_item_id: str, invoice_id: str) -> dict:
        return self.create_association("line_items", line_item_id, "invoices", invoice_id, ASSOC_LINE_ITEM_TO_INVOICE)

    # ------------------------------------------------------------------
    # diagnostics
    # ------------------------------------------------------------------

    def test_connection(self) -> bool:
        try:
            self._request("GET", "/crm/v3/objects/products", params={"limit": 1})
        except HubSpotAPIError:
            return False
        return True

    def get_auth_status(self) -> dict:
        return {
            "mode": "private_app" if self.token else None,
            "has_private_key": bool(self.token),
            "portal_id": getattr(settings, "HUBSPOT_PORTAL_ID", "") or None,
        }


def get_client() -> HubSpotClient:
    """Build a client from the ``HUBSPOT_*`` settings."""
    return HubSpotClient(
        access_token=getattr(settings, "HUBSPOT_ACCESS_TOKEN", ""),
        base_url=getattr(settings, "HUBSPOT_API_BASE", None),
        timeout=getattr(settings, "HUBSPOT_TIMEOUT", 30),
        max_retries=getattr(settings, "HUBSPOT_MAX_RETRIES", 3),
    )
