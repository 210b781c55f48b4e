from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .config import settings
from .database import engine, Base
from .routers import (
    auth, metal_types, stone_types, product_types, products, pricing,
    customization_requests, design_requests, uploads, orders, payments,
    ai_content, inspiration,
)

logger = logging.getLogger("storefront")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

BASE_REVISION = "3f2a9c1d7b40"


def _run_migrations():
    """Run pending Alembic migrations on startup.

    Databases created by Base.metadata.create_all() before Alembic was set up
    have no alembic_version table; those get the base revision stamped first.
    """
    try:
        from alembic.config import Config
        from alembic import command
        from sqlalchemy import inspect

        alembic_ini = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        if not os.path.exists(alembic_ini):
            logger.info("alembic.ini not found, skipping migrations")
            return

        alembic_cfg = Config(alembic_ini)
        alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

        insp = inspect(engine)
        has_alembic = "alembic_version" in insp.get_table_names()
        has_products = "products" in insp.get_table_names()

        if not has_alembic and has_products:
            logger.info(f"Stamping base migration {BASE_REVISION} (tables already exist)")
            command.stamp(alembic_cfg, BASE_REVISION)

        logger.info("Running pending Alembic migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations complete")

    except Exception as e:
        # Never let migration errors prevent app startup
        logger.warning(f"Alembic migration warning: {e}")


app = FastAPI(
    title=f"{settings.STORE_NAME} Storefront",
    description="Jewelry storefront: catalog, customization estimates, custom designs and checkout",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api")
app.include_router(metal_types.router, prefix="/api")
app.include_router(stone_types.router, prefix="/api")
app.include_router(product_types.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(pricing.router, prefix="/api")
app.include_router(customization_requests.router, prefix="/api")
app.include_router(design_requests.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(ai_content.router, prefix="/api")
app.include_router(inspiration.router, prefix="/api")

# Serve uploaded images (local fallback when R2 not configured)
uploads_path = settings.UPLOAD_DIR
if os.path.exists(uploads_path):
    app.mount("/uploads", StaticFiles(directory=uploads_path), name="uploads")


@app.get("/health")
def health():
    return {"status": "ok", "app": "jewelry-storefront"}


@app.on_event("startup")
def auto_migrate():
    """Run pending Alembic migrations on startup."""
    _run_migrations()


def bootstrap_admin(db):
    """Create the admin account from ADMIN_USERNAME / ADMIN_PASSWORD if missing."""
    from . import models
    from .auth import hash_password

    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        return None
    admin = db.query(models.User).filter(models.User.username == settings.ADMIN_USERNAME).first()
    if admin:
        if admin.role != "admin":
            admin.role = "admin"
        return admin
    admin = models.User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL or settings.STORE_EMAIL,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        role="admin",
    )
    db.add(admin)
    logger.info(f"Bootstrapped admin account '{settings.ADMIN_USERNAME}'")
    return admin


@app.on_event("startup")
def auto_seed():
    """Auto-seed catalog lookup tables and the admin account on first run."""
    from .database import SessionLocal
    db = SessionLocal()
    try:
        metal_types.seed_metal_types(db)
        stone_types.seed_stone_types(db)
        product_types.seed_product_types(db)
        bootstrap_admin(db)
        db.commit()
    finally:
        db.close()
