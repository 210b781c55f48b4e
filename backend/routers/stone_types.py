from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(tags=["stone-types"])

# Default stone catalog — price_modifier is INR per carat.
# NOTE: these are retail-facing per-carat prices; overhead is applied by the pricer.
DEFAULT_STONES = {
    "Natural Diamond": {"price_modifier": 56000.0, "display_order": 1, "color": "#B9F2FF"},
    "Lab Grown Diamond": {"price_modifier": 20000.0, "display_order": 2, "color": "#DDF6FF"},
    "Natural Polki": {"price_modifier": 15000.0, "display_order": 3, "color": "#F5F5DC"},
    "Lab Polki": {"price_modifier": 7000.0, "display_order": 4, "color": "#FAFAD2"},
    "Ruby": {"price_modifier": 3000.0, "display_order": 5, "color": "#E0115F"},
    "Blue Sapphire": {"price_modifier": 3000.0, "display_order": 6, "color": "#0F52BA"},
    "Emerald": {"price_modifier": 3500.0, "display_order": 7, "color": "#50C878"},
    "Tanzanite": {"price_modifier": 1500.0, "display_order": 8, "color": "#4D5A9A"},
    "Amethyst": {"price_modifier": 1500.0, "display_order": 9, "color": "#9966CC"},
    "South Sea Pearl": {"price_modifier": 300.0, "display_order": 10, "color": "#FDF5E6"},
    "Pearl": {"price_modifier": 100.0, "display_order": 11, "color": "#FFFFF0"},
    "Cubic Zirconia": {"price_modifier": 1000.0, "display_order": 12, "color": "#F8F8FF"},
}


def seed_stone_types(db: Session) -> int:
    """Insert any default stones that are missing. Returns rows added."""
    added = 0
    for name, data in DEFAULT_STONES.items():
        existing = db.query(models.StoneType).filter(models.StoneType.name == name).first()
        if not existing:
            db.add(models.StoneType(name=name, **data))
            added += 1
    db.commit()
    return added


def _get_or_404(stone_id: int, db: Session) -> models.StoneType:
    stone = db.query(models.StoneType).filter(models.StoneType.id == stone_id).first()
    if not stone:
        raise HTTPException(status_code=404, detail="Stone type not found")
    return stone


@router.get("/stone-types", response_model=List[schemas.StoneType])
def list_stone_types(db: Session = Depends(get_db)):
    return db.query(models.StoneType).filter(
        models.StoneType.is_active == True  # noqa: E712
    ).order_by(models.StoneType.display_order, models.StoneType.name).all()


@router.get("/stone-types/{stone_id}", response_model=schemas.StoneType)
def get_stone_type(stone_id: int, db: Session = Depends(get_db)):
    return _get_or_404(stone_id, db)


@router.get("/admin/stone-types", response_model=List[schemas.StoneType])
def admin_list_stone_types(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    return db.query(models.StoneType).order_by(models.StoneType.display_order).all()


@router.post("/admin/stone-types", response_model=schemas.StoneType)
def create_stone_type(
    stone: schemas.StoneTypeCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    if db.query(models.StoneType).filter(models.StoneType.name == stone.name).first():
        raise HTTPException(status_code=409, detail="Stone type with this name already exists")
    db_stone = models.StoneType(**stone.model_dump())
    db.add(db_stone)
    db.commit()
    db.refresh(db_stone)
    return db_stone


@router.patch("/admin/stone-types/{stone_id}", response_model=schemas.StoneType)
def update_stone_type(
    stone_id: int,
    update: schemas.StoneTypeUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    stone = _get_or_404(stone_id, db)
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(stone, field, value)
    db.commit()
    db.refresh(stone)
    return stone


@router.delete("/admin/stone-types/{stone_id}")
def delete_stone_type(stone_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    stone = _get_or_404(stone_id, db)
    db.delete(stone)
    db.commit()
    return {"ok": True}
