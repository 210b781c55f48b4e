from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(tags=["metal-types"])

# Default metal catalog — price_modifier is a % markup relative to the baseline metal.
# Update via admin API as gold/platinum spreads move.
DEFAULT_METALS = {
    "14k Gold": {"price_modifier": 0.0, "display_order": 1, "color": "#D4AF37"},
    "18k Gold": {"price_modifier": 18.0, "display_order": 2, "color": "#E5C100"},
    "22k Gold": {"price_modifier": 30.0, "display_order": 3, "color": "#F0C420"},
    "18k White Gold": {"price_modifier": 20.0, "display_order": 4, "color": "#E8E8E8"},
    "18k Rose Gold": {"price_modifier": 18.0, "display_order": 5, "color": "#B76E79"},
    "Platinum": {"price_modifier": 35.0, "display_order": 6, "color": "#E5E4E2"},
    "Sterling Silver": {"price_modifier": -60.0, "display_order": 7, "color": "#C0C0C0"},
}


def seed_metal_types(db: Session) -> int:
    """Insert any default metals that are missing. Returns rows added."""
    added = 0
    for name, data in DEFAULT_METALS.items():
        existing = db.query(models.MetalType).filter(models.MetalType.name == name).first()
        if not existing:
            db.add(models.MetalType(name=name, **data))
            added += 1
    db.commit()
    return added


def _get_or_404(metal_id: int, db: Session) -> models.MetalType:
    metal = db.query(models.MetalType).filter(models.MetalType.id == metal_id).first()
    if not metal:
        raise HTTPException(status_code=404, detail="Metal type not found")
    return metal


@router.get("/metal-types", response_model=List[schemas.MetalType])
def list_metal_types(db: Session = Depends(get_db)):
    """Active metals in display order — what the customizer offers."""
    return db.query(models.MetalType).filter(
        models.MetalType.is_active == True  # noqa: E712
    ).order_by(models.MetalType.display_order, models.MetalType.name).all()


@router.get("/metal-types/{metal_id}", response_model=schemas.MetalType)
def get_metal_type(metal_id: int, db: Session = Depends(get_db)):
    return _get_or_404(metal_id, db)


@router.get("/admin/metal-types", response_model=List[schemas.MetalType])
def admin_list_metal_types(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return db.query(models.MetalType).order_by(models.MetalType.display_order).all()


@router.post("/admin/metal-types", response_model=schemas.MetalType)
def create_metal_type(
    metal: schemas.MetalTypeCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    if db.query(models.MetalType).filter(models.MetalType.name == metal.name).first():
        raise HTTPException(status_code=409, detail="Metal type with this name already exists")
    db_metal = models.MetalType(**metal.model_dump())
    db.add(db_metal)
    db.commit()
    db.refresh(db_metal)
    return db_metal


@router.patch("/admin/metal-types/{metal_id}", response_model=schemas.MetalType)
def update_metal_type(
    metal_id: int,
    update: schemas.MetalTypeUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    metal = _get_or_404(metal_id, db)
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(metal, field, value)
    db.commit()
    db.refresh(metal)
    return metal


@router.delete("/admin/metal-types/{metal_id}")
def delete_metal_type(metal_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    metal = _get_or_404(metal_id, db)
    db.delete(metal)
    db.commit()
    return {"ok": True}
