"""
PayPal checkout tests. The PayPal REST client is always patched; without
credentials the real client raises PayPalNotConfigured.
"""

from unittest.mock import patch

import pytest

from backend import models, paypal_client
from backend.config import settings


SHIPPING_US = {"name": "Priya Shah", "email": "priya@example.com", "country": "US", "city": "Austin"}


def _create(client, items, currency="USD", shipping_address=None, headers=None):
    return client.post("/api/payment/create-paypal-order", json={
        "items": items,
        "currency": currency,
        "shipping_address": shipping_address if shipping_address is not None else SHIPPING_US,
    }, headers=headers or {})


@pytest.fixture
def paypal():
    with patch.object(paypal_client, "create_order", return_value={"id": "PP-ORDER-1", "status": "CREATED"}) as create, \
            patch.object(paypal_client, "capture_order", return_value={"id": "PP-ORDER-1", "status": "COMPLETED"}) as capture:
        yield {"create": create, "capture": capture}


@pytest.fixture
def design_request(db):
    design = models.DesignRequest(
        full_name="Priya Shah",
        email="priya@example.com",
        metal_type="22k Gold",
        primary_stones=["Emerald"],
        image_urls=["/uploads/designs/ref.jpg"],
    )
    db.add(design)
    db.commit()
    db.refresh(design)
    return design


def test_client_id_unconfigured(client):
    assert client.get("/api/payment/paypal-client-id").status_code == 503


def test_client_id_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "PAYPAL_CLIENT_ID", "sandbox-client")
    data = client.get("/api/payment/paypal-client-id").json()
    assert data == {"client_id": "sandbox-client", "mode": "sandbox"}


def test_product_checkout_charges_advance(client, product, paypal, db):
    """$1000 ring + $30 shipping = $1030; half is due now."""
    response = _create(client, [{"product_id": product.id}])
    assert response.status_code == 200
    data = response.json()
    assert data["order_id"] == "PP-ORDER-1"
    assert data["total"] == 1030
    assert data["shipping"] == 30
    assert data["amount_due_now"] == 515

    amount, currency = paypal["create"].call_args[0][:2]
    assert (amount, currency) == (515, "USD")

    order = db.query(models.Order).filter(models.Order.id == data["local_order_id"]).first()
    assert order.payment_id == "PP-ORDER-1"
    assert order.payment_status == "pending"
    assert order.balance_amount == 515
    assert order.user_id is None


def test_product_checkout_inr(client, product, paypal):
    data = _create(
        client, [{"product_id": product.id}], currency="INR",
        shipping_address={"name": "Priya", "country": "IN"},
    ).json()
    assert data["total"] == 83000 + 1500
    assert data["amount_due_now"] == 42250


def test_logged_in_checkout_links_user(client, auth_headers, product, paypal, db):
    data = _create(client, [{"product_id": product.id}], headers=auth_headers).json()
    order = db.query(models.Order).filter(models.Order.id == data["local_order_id"]).first()
    assert order.user_id is not None


@pytest.mark.parametrize("currency,country", [("USD", "IN"), ("INR", "US")])
def test_currency_country_mismatch(client, product, paypal, currency, country):
    response = _create(client, [{"product_id": product.id}], currency=currency, shipping_address={"country": country})
    assert response.status_code == 400
    paypal["create"].assert_not_called()


def test_product_checkout_needs_address(client, product, paypal):
    assert _create(client, [{"product_id": product.id}], shipping_address={}).status_code == 400


def test_empty_cart_and_bad_currency(client, product, paypal):
    assert _create(client, []).status_code == 400
    assert _create(client, [{"product_id": product.id}], currency="GBP").status_code == 400


def test_unknown_product(client, paypal):
    assert _create(client, [{"product_id": 999}]).status_code == 404


def test_consultation_fee_charged_in_full(client, design_request, paypal, db):
    response = _create(
        client,
        [{"design_request_id": design_request.id, "is_custom_design": True}],
        shipping_address={},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["amount_due_now"] == 150
    assert data["total"] == 150
    assert data["shipping"] == 0


def test_capture_marks_order_and_design_paid(client, design_request, paypal, db):
    local_id = _create(client, [{"design_request_id": design_request.id}], shipping_address={}).json()["local_order_id"]

    response = client.post("/api/payment/capture-paypal-order", json={"order_id": "PP-ORDER-1"})
    assert response.status_code == 200
    order = response.json()["order"]
    assert order["id"] == local_id
    assert order["payment_status"] == "full_paid"
    assert order["order_status"] == "processing"

    db.refresh(design_request)
    assert design_request.consultation_fee_paid is True
    assert design_request.status == "design_fee_paid"

    again = client.post("/api/payment/capture-paypal-order", json={"order_id": "PP-ORDER-1"})
    assert again.status_code == 409


def test_capture_product_order_is_advance_paid(client, product, paypal):
    _create(client, [{"product_id": product.id}])
    order = client.post("/api/payment/capture-paypal-order", json={"order_id": "PP-ORDER-1"}).json()["order"]
    assert order["payment_status"] == "advance_paid"


def test_capture_not_completed(client, product, paypal):
    _create(client, [{"product_id": product.id}])
    paypal["capture"].return_value = {"id": "PP-ORDER-1", "status": "PAYER_ACTION_REQUIRED"}
    response = client.post("/api/payment/capture-paypal-order", json={"order_id": "PP-ORDER-1"})
    assert response.status_code == 402


def test_capture_unknown_order(client, paypal):
    assert client.post("/api/payment/capture-paypal-order", json={"order_id": "NOPE"}).status_code == 404


def test_cancel_pending_order(client, product, paypal, db):
    local_id = _create(client, [{"product_id": product.id}]).json()["local_order_id"]
    response = client.post("/api/payment/cancel-paypal-order", json={"order_id": "PP-ORDER-1"})
    assert response.status_code == 200
    order = db.query(models.Order).filter(models.Order.id == local_id).first()
    assert order.order_status == "cancelled"


def test_paypal_unconfigured_returns_503(client, product, db):
    response = _create(client, [{"product_id": product.id}])
    assert response.status_code == 503
    assert db.query(models.Order).count() == 0


def test_paypal_api_error_returns_502(client, product):
    with patch.object(paypal_client, "create_order", side_effect=paypal_client.PayPalError("boom")):
        response = _create(client, [{"product_id": product.id}])
    assert response.status_code == 502
