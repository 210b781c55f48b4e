"""
Catalog tests — metal/stone/product types, products, and the public price
calculator.
"""

from backend import models
from backend.routers.metal_types import DEFAULT_METALS, seed_metal_types
from backend.routers.stone_types import DEFAULT_STONES
from backend.routers.product_types import seed_product_types


# --- Seeding ---

def test_seed_is_idempotent(db):
    assert seed_metal_types(db) == len(DEFAULT_METALS)
    assert seed_metal_types(db) == 0
    assert db.query(models.MetalType).count() == len(DEFAULT_METALS)


def test_public_lists_are_active_and_ordered(client, catalog, db):
    silver = db.query(models.MetalType).filter(models.MetalType.name == "Sterling Silver").first()
    silver.is_active = False
    db.commit()

    metals = client.get("/api/metal-types").json()
    names = [m["name"] for m in metals]
    assert "Sterling Silver" not in names
    assert names[0] == "14k Gold"

    stones = client.get("/api/stone-types").json()
    assert len(stones) == len(DEFAULT_STONES)
    assert stones[0]["name"] == "Natural Diamond"
    assert stones[0]["price_modifier"] == 56000.0


def test_get_metal_type_404(client):
    assert client.get("/api/metal-types/999").status_code == 404


# --- Admin catalog CRUD ---

def test_admin_create_update_delete_metal(client, admin_headers):
    response = client.post("/api/admin/metal-types", json={
        "name": "Palladium", "price_modifier": 25.0, "display_order": 8,
    }, headers=admin_headers)
    assert response.status_code == 200
    metal_id = response.json()["id"]

    duplicate = client.post("/api/admin/metal-types", json={"name": "Palladium"}, headers=admin_headers)
    assert duplicate.status_code == 409

    updated = client.patch(f"/api/admin/metal-types/{metal_id}", json={"price_modifier": 28.0}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["price_modifier"] == 28.0
    assert updated.json()["name"] == "Palladium"

    assert client.delete(f"/api/admin/metal-types/{metal_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/metal-types/{metal_id}").status_code == 404


def test_admin_create_stone(client, admin_headers):
    response = client.post("/api/admin/stone-types", json={
        "name": "Alexandrite", "price_modifier": 45000.0, "image_url": "/uploads/inspiration/alex.jpg",
    }, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["image_url"] == "/uploads/inspiration/alex.jpg"


def test_catalog_admin_requires_admin(client, auth_headers):
    response = client.post("/api/admin/stone-types", json={"name": "Opal"}, headers=auth_headers)
    assert response.status_code == 403


def test_product_type_in_use_cannot_be_deleted(client, admin_headers, db):
    seed_product_types(db)
    ring = db.query(models.ProductType).filter(models.ProductType.name == "Ring").first()
    db.add(models.Product(
        name="Band", description="Plain band", base_price=20000,
        image_url="/uploads/products/band.jpg", product_type_id=ring.id,
    ))
    db.commit()

    response = client.delete(f"/api/admin/product-types/{ring.id}", headers=admin_headers)
    assert response.status_code == 409


# --- Products ---

def _product_payload(**overrides):
    payload = {
        "name": "Emerald Drop Earrings",
        "description": "Pear-cut emeralds on 18k gold hooks",
        "base_price": 60000,
        "image_url": "/uploads/products/drops.jpg",
        "category": "earrings",
        "is_featured": True,
        "metal_type": "18k Gold",
        "metal_weight": 6.0,
        "main_stone_type": "Emerald",
        "main_stone_weight": 2.0,
    }
    payload.update(overrides)
    return payload


def test_admin_create_product_and_public_read(client, admin_headers):
    response = client.post("/api/admin/products", json=_product_payload(), headers=admin_headers)
    assert response.status_code == 200
    product_id = response.json()["id"]

    product = client.get(f"/api/products/{product_id}").json()
    assert product["main_stone_type"] == "Emerald"
    assert product["calculated_price_usd"] is None

    featured = client.get("/api/products/featured").json()
    assert [p["id"] for p in featured] == [product_id]

    by_category = client.get("/api/products", params={"category": "EARRINGS"}).json()
    assert len(by_category) == 1


def test_create_product_with_recalculated_price(client, admin_headers):
    """No catalog: 6g 18k + 2ct emerald → (33750 + 7000) × 1.25 = 50938 INR."""
    response = client.post(
        "/api/admin/products",
        json=_product_payload(recalculate_price=True),
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["calculated_price_inr"] == 50938
    assert data["calculated_price_usd"] == round(50938 / 83.0)


def test_update_product(client, admin_headers):
    product_id = client.post("/api/admin/products", json=_product_payload(), headers=admin_headers).json()["id"]
    response = client.patch(f"/api/admin/products/{product_id}", json={"is_featured": False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_featured"] is False
    assert response.json()["name"] == "Emerald Drop Earrings"


def test_create_product_unknown_type(client, admin_headers):
    response = client.post("/api/admin/products", json=_product_payload(product_type_id=42), headers=admin_headers)
    assert response.status_code == 404


def test_delete_product(client, admin_headers):
    product_id = client.post("/api/admin/products", json=_product_payload(), headers=admin_headers).json()["id"]
    assert client.delete(f"/api/admin/products/{product_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/products/{product_id}").status_code == 404


# --- Price calculator ---

def test_calculate_price_by_name(client):
    response = client.post("/api/calculate-price", json={
        "metal_type": "18k Gold",
        "metal_weight": 5.0,
        "gems": [{"name": "Natural Diamond", "carats": 0.5}],
    })
    assert response.status_code == 200
    data = response.json()
    # (28125 + 28000) × 1.25
    assert data["price_inr"] == round(56125 * 1.25)
    assert data["breakdown"]["stone_cost"] == 28000


def test_calculate_price_requires_metal(client):
    response = client.post("/api/calculate-price", json={"metal_weight": 5.0})
    assert response.status_code == 400


def test_calculate_price_unknown_metal_id(client):
    response = client.post("/api/calculate-price", json={"metal_type_id": 999})
    assert response.status_code == 404


def test_exchange_rate(client):
    data = client.get("/api/exchange-rate").json()
    assert data["usd_to_inr"] == 83.0
    assert data["stone_inr_per_usd"] == 83.8488


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "app": "jewelry-storefront"}
