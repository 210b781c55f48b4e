from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(tags=["inspiration"])


def _get_or_404(item_id: int, db: Session) -> models.InspirationItem:
    item = db.query(models.InspirationItem).filter(models.InspirationItem.id == item_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Inspiration item not found")
    return item


@router.get("/inspiration", response_model=List[schemas.Inspiration])
def list_inspiration(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return db.query(models.InspirationItem).order_by(
        models.InspirationItem.created_at.desc()
    ).offset(skip).limit(limit).all()


@router.get("/inspiration/featured", response_model=List[schemas.Inspiration])
def list_featured_inspiration(db: Session = Depends(get_db)):
    return db.query(models.InspirationItem).filter(
        models.InspirationItem.featured == True  # noqa: E712
    ).order_by(models.InspirationItem.created_at.desc()).all()


@router.get("/inspiration/category/{category}", response_model=List[schemas.Inspiration])
def list_inspiration_by_category(category: str, db: Session = Depends(get_db)):
    return db.query(models.InspirationItem).filter(
        models.InspirationItem.category == category.lower()
    ).order_by(models.InspirationItem.created_at.desc()).all()


@router.post("/admin/inspiration", response_model=schemas.Inspiration)
def create_inspiration(
    item: schemas.InspirationCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    data = item.model_dump()
    data["category"] = data["category"].lower()
    db_item = models.InspirationItem(**data)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


@router.patch("/admin/inspiration/{item_id}", response_model=schemas.Inspiration)
def update_inspiration(
    item_id: int,
    update: schemas.InspirationUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    item = _get_or_404(item_id, db)
    data = update.model_dump(exclude_unset=True)
    if data.get("category"):
        data["category"] = data["category"].lower()
    for field, value in data.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return item


@router.delete("/admin/inspiration/{item_id}")
def delete_inspiration(item_id: int, db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    item = _get_or_404(item_id, db)
    db.delete(item)
    db.commit()
    return {"ok": True}
