from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(tags=["product-types"])

DEFAULT_PRODUCT_TYPES = {
    "Necklace": {"display_order": 1, "icon": "gem"},
    "Earrings": {"display_order": 2, "icon": "sparkles"},
    "Ring": {"display_order": 3, "icon": "circle"},
    "Bracelet": {"display_order": 4, "icon": "link"},
    "Pendant": {"display_order": 5, "icon": "heart"},
}


def seed_product_types(db: Session) -> int:
    added = 0
    for name, data in DEFAULT_PRODUCT_TYPES.items():
        existing = db.query(models.ProductType).filter(models.ProductType.name == name).first()
        if not existing:
            db.add(models.ProductType(name=name, **data))
            added += 1
    db.commit()
    return added


def _get_or_404(type_id: int, db: Session) -> models.ProductType:
    product_type = db.query(models.ProductType).filter(models.ProductType.id == type_id).first()
    if not product_type:
        raise HTTPException(status_code=404, detail="Product type not found")
    return product_type


@router.get("/product-types", response_model=List[schemas.ProductType])
def list_product_types(active_only: bool = True, db: Session = Depends(get_db)):
    query = db.query(models.ProductType)
    if active_only:
        query = query.filter(models.ProductType.is_active == True)  # noqa: E712
    return query.order_by(models.ProductType.display_order, models.ProductType.name).all()


@router.get("/product-types/{type_id}", response_model=schemas.ProductType)
def get_product_type(type_id: int, db: Session = Depends(get_db)):
    return _get_or_404(type_id, db)


@router.post("/admin/product-types", response_model=schemas.ProductType)
def create_product_type(
    product_type: schemas.ProductTypeCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    if db.query(models.ProductType).filter(models.ProductType.name == product_type.name).first():
        raise HTTPException(status_code=409, detail="Product type with this name already exists")
    db_type = models.ProductType(**product_type.model_dump())
    db.add(db_type)
    db.commit()
    db.refresh(db_type)
    return db_type


@router.patch("/admin/product-types/{type_id}", response_model=schemas.ProductType)
def update_product_type(
    type_id: int,
    update: schemas.ProductTypeUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    product_type = _get_or_404(type_id, db)
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(product_type, field, value)
    db.commit()
    db.refresh(product_type)
    return product_type


@router.delete("/admin/product-types/{type_id}")
def delete_product_type(type_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    product_type = _get_or_404(type_id, db)
    if product_type.products:
        raise HTTPException(status_code=409, detail="Product type is in use by existing products")
    db.delete(product_type)
    db.commit()
    return {"ok": True}
