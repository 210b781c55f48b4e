from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import models, schemas
from ..auth import require_admin
from ..database import get_db
from ..jewelry_pricer import JewelryPricer

router = APIRouter(tags=["products"])

STONE_FIELDS = [
    ("main_stone_type", "main_stone_weight"),
    ("secondary_stone_type", "secondary_stone_weight"),
    ("other_stone_type", "other_stone_weight"),
]


def product_composition(product: models.Product) -> dict:
    """Product fields the customization estimator reads."""
    return {
        "id": product.id,
        "base_price": product.base_price,
        "calculated_price_usd": product.calculated_price_usd,
        "metal_type": product.metal_type,
        "metal_weight": product.metal_weight,
        "main_stone_type": product.main_stone_type,
        "main_stone_weight": product.main_stone_weight,
        "secondary_stone_type": product.secondary_stone_type,
        "secondary_stone_weight": product.secondary_stone_weight,
        "other_stone_type": product.other_stone_type,
        "other_stone_weight": product.other_stone_weight,
    }


def product_summary(product: Optional[models.Product]) -> Optional[dict]:
    if product is None:
        return None
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "image_url": product.image_url,
        "base_price": product.base_price,
        "calculated_price_usd": product.calculated_price_usd,
    }


def apply_calculated_price(product: models.Product, db: Session) -> dict:
    """Reprice a product from its metal/stone composition and store both currencies."""
    pricer = JewelryPricer(
        db.query(models.MetalType).all(),
        db.query(models.StoneType).all(),
    )
    gems = [
        {"name": getattr(product, name_field), "carats": getattr(product, weight_field)}
        for name_field, weight_field in STONE_FIELDS
        if getattr(product, name_field)
    ]
    metal = db.query(models.MetalType).filter(
        models.MetalType.name.ilike(product.metal_type or "")
    ).first()
    result = pricer.calculate(
        product.metal_type or "",
        product.metal_weight or 0.0,
        gems,
        metal_type_id=metal.id if metal else None,
    )
    product.calculated_price_inr = result["price_inr"]
    product.calculated_price_usd = result["price_usd"]
    return result


def _get_or_404(product_id: int, db: Session) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/products", response_model=List[schemas.Product])
def list_products(
    category: Optional[str] = None,
    product_type_id: Optional[int] = None,
    featured: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(models.Product)
    if category:
        query = query.filter(models.Product.category.ilike(category))
    if product_type_id is not None:
        query = query.filter(models.Product.product_type_id == product_type_id)
    if featured is not None:
        query = query.filter(models.Product.is_featured == featured)
    return query.order_by(models.Product.created_at.desc()).offset(skip).limit(limit).all()


@router.get("/products/featured", response_model=List[schemas.Product])
def list_featured_products(limit: int = 8, db: Session = Depends(get_db)):
    return db.query(models.Product).filter(
        models.Product.is_featured == True  # noqa: E712
    ).order_by(models.Product.created_at.desc()).limit(limit).all()


@router.get("/products/{product_id}", response_model=schemas.Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_or_404(product_id, db)


@router.post("/admin/products", response_model=schemas.Product)
def create_product(
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    data = product.model_dump(exclude={"recalculate_price"})
    if data.get("product_type_id") is not None:
        exists = db.query(models.ProductType).filter(models.ProductType.id == data["product_type_id"]).first()
        if not exists:
            raise HTTPException(status_code=404, detail="Product type not found")

    db_product = models.Product(**data)
    if product.recalculate_price:
        apply_calculated_price(db_product, db)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product


@router.patch("/admin/products/{product_id}", response_model=schemas.Product)
def update_product(
    product_id: int,
    update: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    product = _get_or_404(product_id, db)
    for field, value in update.model_dump(exclude_unset=True, exclude={"recalculate_price"}).items():
        setattr(product, field, value)
    if update.recalculate_price:
        apply_calculated_price(product, db)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/admin/products/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    product = _get_or_404(product_id, db)
    db.delete(product)
    db.commit()
    return {"ok": True}
