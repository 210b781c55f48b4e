"""
Shared test fixtures — SQLite test database, test client, auth and catalog helpers.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set JWT_SECRET before importing app modules
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["GEMINI_API_KEY"] = ""
os.environ["PAYPAL_CLIENT_ID"] = ""
os.environ["PAYPAL_CLIENT_SECRET"] = ""

from backend import models
from backend.auth import create_access_token, hash_password
from backend.config import settings
from backend.database import Base, get_db
from backend.main import app
from backend.routers.metal_types import seed_metal_types
from backend.routers.stone_types import seed_stone_types


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def local_uploads(tmp_path, monkeypatch):
    """Uploads go to a temp dir, never R2."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "CLOUDFLARE_R2_ACCOUNT_ID", "")


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers(client):
    """Register a customer and return auth headers."""
    response = client.post("/api/auth/register", json={
        "username": "priya",
        "email": "priya@example.com",
        "password": "strongpassword123",
    })
    assert response.status_code == 200
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(client):
    """A second customer, for ownership checks."""
    response = client.post("/api/auth/register", json={
        "username": "rahul",
        "email": "rahul@example.com",
        "password": "anotherpassword456",
    })
    assert response.status_code == 200
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(db):
    """Admin accounts are never registered through the API — insert one directly."""
    admin = models.User(
        username="admin",
        email="admin@example.com",
        password_hash=hash_password("adminpassword123"),
        role="admin",
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return {"Authorization": f"Bearer {create_access_token(admin)}"}


@pytest.fixture
def catalog(db):
    """Default metal and stone types, keyed by name."""
    seed_metal_types(db)
    seed_stone_types(db)
    metals = {m.name: m.id for m in db.query(models.MetalType).all()}
    stones = {s.name: s.id for s in db.query(models.StoneType).all()}
    return {"metals": metals, "stones": stones}


@pytest.fixture
def product(db):
    """An 18k Gold ring with a 1ct natural diamond, listed at $1000."""
    p = models.Product(
        name="Solitaire Ring",
        description="Classic solitaire",
        base_price=80000,
        calculated_price_usd=1000,
        calculated_price_inr=83000,
        image_url="/uploads/products/solitaire.jpg",
        category="rings",
        metal_type="18k Gold",
        metal_weight=4.0,
        main_stone_type="Natural Diamond",
        main_stone_weight=1.0,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p
