"""
PayPal Orders v2 REST client.

Only the three calls checkout needs: OAuth token, create order, capture order.
Credentials come from settings; PAYPAL_MODE picks sandbox or live.
"""

import base64
import json
import logging
import urllib.error
import urllib.request

from .config import settings

logger = logging.getLogger(__name__)

API_BASE = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


class PayPalNotConfigured(Exception):
    """PAYPAL_CLIENT_ID / PAYPAL_CLIENT_SECRET missing."""


class PayPalError(Exception):
    """PayPal rejected the call or could not be reached."""


def is_configured() -> bool:
    return bool(settings.PAYPAL_CLIENT_ID and settings.PAYPAL_CLIENT_SECRET)


def _base_url() -> str:
    return API_BASE.get(settings.PAYPAL_MODE, API_BASE["sandbox"])


def _request(method: str, path: str, headers: dict, body: bytes = None, timeout: int = 30) -> dict:
    req = urllib.request.Request(_base_url() + path, data=body, headers=headers, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return json.loads(response.read() or b"{}")
    except urllib.error.HTTPError as e:
        error_body = e.read().decode(errors="replace")
        logger.error("PayPal %s %s failed (%s): %s", method, path, e.code, error_body)
        raise PayPalError(f"PayPal API error {e.code}: {error_body}")
    except urllib.error.URLError as e:
        logger.error("PayPal %s %s unreachable: %s", method, path, e.reason)
        raise PayPalError(f"PayPal unreachable: {e.reason}")


def get_access_token() -> str:
    if not is_configured():
        raise PayPalNotConfigured("PayPal credentials are not configured")

    credentials = f"{settings.PAYPAL_CLIENT_ID}:{settings.PAYPAL_CLIENT_SECRET}".encode()
    result = _request(
        "POST",
        "/v1/oauth2/token",
        headers={
            "Authorization": "Basic " + base64.b64encode(credentials).decode(),
            "Content-Type": "application/x-www-form-urlencoded",
        },
        body=b"grant_type=client_credentials",
    )
    return result["access_token"]


def _auth_headers() -> dict:
    return {
        "Authorization": f"Bearer {get_access_token()}",
        "Content-Type": "application/json",
    }


def create_order(amount: int, currency: str, reference_id: str, description: str = "") -> dict:
    """
    Create a CAPTURE-intent order for a single amount.
    Returns PayPal's order resource ({"id": ..., "status": "CREATED", ...}).
    """
    payload = {
        "intent": "CAPTURE",
        "purchase_units": [{
            "reference_id": reference_id,
            "description": description[:127],
            "amount": {"currency_code": currency, "value": f"{amount:.2f}"},
        }],
    }
    return _request("POST", "/v2/checkout/orders", _auth_headers(), json.dumps(payload).encode("utf-8"))


def capture_order(paypal_order_id: str) -> dict:
    """Capture an approved order. Returns PayPal's capture result."""
    return _request("POST", f"/v2/checkout/orders/{paypal_order_id}/capture", _auth_headers(), b"{}")
