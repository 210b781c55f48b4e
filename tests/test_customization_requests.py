"""
Customization request tests — live estimate endpoint, server-side recompute on
submit, ownership, admin status workflow.
"""

import pytest

from backend import models


def test_estimate_platinum_upgrade(client, catalog, product):
    """$1000 18k Gold ring → Platinum: 600 × (1.35/1.18 − 1) ≈ +86 → 1086."""
    response = client.post("/api/customization-requests/estimate", json={
        "product_id": product.id,
        "selection": {"metal_type_id": catalog["metals"]["Platinum"]},
    })
    assert response.status_code == 200
    data = response.json()
    assert data["estimated_price"] == 1086
    assert data["original_price"] == 1000
    assert data["warnings"] == []


def test_estimate_stone_swap(client, catalog, product):
    """1ct natural diamond → lab grown: (20000 − 56000) / 83.8488 ≈ −429."""
    response = client.post("/api/customization-requests/estimate", json={
        "product_id": product.id,
        "selection": {"main_stone_id": catalog["stones"]["Lab Grown Diamond"]},
    })
    data = response.json()
    assert data["stone_delta"] == pytest.approx(-36000 / 83.8488, abs=0.01)
    assert data["estimated_price"] == round(1000 - 36000 / 83.8488)


def test_estimate_accepts_none_selected(client, catalog, product):
    response = client.post("/api/customization-requests/estimate", json={
        "product_id": product.id,
        "selection": {"metal_type_id": "none_selected", "main_stone_id": "none_selected"},
    })
    assert response.status_code == 200
    assert response.json()["estimated_price"] == 1000


def test_estimate_without_catalog(client, product):
    response = client.post("/api/customization-requests/estimate", json={"product_id": product.id})
    assert response.status_code == 200
    data = response.json()
    assert data["estimated_price"] is None
    assert data["original_price"] == 1000
    assert data["warnings"]


def test_estimate_unknown_product(client, catalog):
    response = client.post("/api/customization-requests/estimate", json={"product_id": 999})
    assert response.status_code == 404


def _submit(client, headers, product, selection, **extra):
    payload = {
        "product_id": product.id,
        "name": "Priya Shah",
        "email": "priya@example.com",
        "customization_details": "Platinum please",
        "selection": selection,
    }
    payload.update(extra)
    return client.post("/api/customization-requests", json=payload, headers=headers)


def test_submit_recomputes_estimate(client, auth_headers, catalog, product, db):
    response = _submit(
        client, auth_headers, product,
        {"metal_type_id": catalog["metals"]["Platinum"]},
        estimated_price=1,  # client-sent prices are ignored
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["request"]["estimated_price"] == 1086
    assert data["request"]["status"] == "new"
    assert data["request"]["product"]["name"] == "Solitaire Ring"

    saved = db.query(models.CustomizationRequest).first()
    assert saved.estimated_price == 1086
    assert saved.estimate_json["metal_delta"] == pytest.approx(86.44, abs=0.01)


def test_submit_requires_login(client, catalog, product):
    response = _submit(client, {}, product, {})
    assert response.status_code == 401


def test_customers_see_only_their_requests(client, auth_headers, other_headers, admin_headers, catalog, product):
    mine = _submit(client, auth_headers, product, {}).json()["request"]["id"]
    _submit(client, other_headers, product, {})

    assert [r["id"] for r in client.get("/api/customization-requests", headers=auth_headers).json()] == [mine]
    assert len(client.get("/api/customization-requests", headers=admin_headers).json()) == 2

    assert client.get(f"/api/customization-requests/{mine}", headers=other_headers).status_code == 403
    assert client.get(f"/api/customization-requests/{mine}", headers=admin_headers).status_code == 200


def test_admin_quotes_request(client, auth_headers, admin_headers, catalog, product):
    request_id = _submit(client, auth_headers, product, {}).json()["request"]["id"]
    response = client.patch(f"/api/customization-requests/{request_id}", json={
        "status": "quoted", "quoted_price": 1150, "admin_notes": "Includes rush fee",
    }, headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "quoted"
    assert data["quoted_price"] == 1150


def test_invalid_status_rejected(client, auth_headers, admin_headers, catalog, product):
    request_id = _submit(client, auth_headers, product, {}).json()["request"]["id"]
    response = client.patch(f"/api/customization-requests/{request_id}", json={"status": "shipped"}, headers=admin_headers)
    assert response.status_code == 400


def test_customer_cannot_update_status(client, auth_headers, catalog, product):
    request_id = _submit(client, auth_headers, product, {}).json()["request"]["id"]
    response = client.patch(f"/api/customization-requests/{request_id}", json={"status": "accepted"}, headers=auth_headers)
    assert response.status_code == 403
