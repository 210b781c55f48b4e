"""
Customization requests — customer asks for a catalog product with a
different metal and/or stones.

POST /api/customization-requests/estimate — live price estimate, no save
POST /api/customization-requests          — submit (estimate recomputed here;
                                             a client-sent price is never trusted)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user, require_admin
from ..database import get_db
from ..price_estimator import PriceEstimator
from .products import product_composition, product_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customization-requests", tags=["customization-requests"])


class EstimateRequest(BaseModel):
    product_id: int
    selection: schemas.CustomizationSelection = schemas.CustomizationSelection()


class CustomizationRequestCreate(BaseModel):
    product_id: int
    name: str
    email: str
    phone: Optional[str] = None
    customization_details: Optional[str] = None
    preferred_budget: Optional[str] = None
    timeline: Optional[str] = None
    selection: schemas.CustomizationSelection = schemas.CustomizationSelection()


class CustomizationRequestUpdate(BaseModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = None
    quoted_price: Optional[int] = None


def estimate_for_product(product: models.Product, selection: dict, db: Session) -> Optional[dict]:
    """
    Run the estimator against the live catalog.
    Returns None when the catalog is empty — nothing to price against yet.
    """
    metals = db.query(models.MetalType).all()
    stones = db.query(models.StoneType).all()
    if not metals and not stones:
        logger.info("Catalog empty — skipping estimate for product %s", product.id)
        return None
    estimator = PriceEstimator.from_rows(metals, stones)
    return estimator.estimate(product_composition(product), selection)


def _get_product_or_404(product_id: int, db: Session) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _get_request_or_404(request_id: int, db: Session) -> models.CustomizationRequest:
    req = db.query(models.CustomizationRequest).filter(models.CustomizationRequest.id == request_id).first()
    if not req:
        raise HTTPException(status_code=404, detail="Customization request not found")
    return req


def _request_to_dict(r: models.CustomizationRequest) -> dict:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "product_id": r.product_id,
        "name": r.name,
        "email": r.email,
        "phone": r.phone,
        "customization_details": r.customization_details,
        "preferred_budget": r.preferred_budget,
        "timeline": r.timeline,
        "selection": r.selection_json or {},
        "estimated_price": r.estimated_price,
        "estimate": r.estimate_json,
        "quoted_price": r.quoted_price,
        "admin_notes": r.admin_notes,
        "status": r.status,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "product": product_summary(r.product),
    }


# --- Endpoints ---

@router.post("/estimate")
def estimate(request: EstimateRequest, db: Session = Depends(get_db)):
    product = _get_product_or_404(request.product_id, db)
    result = estimate_for_product(product, request.selection.model_dump(), db)
    if result is None:
        return {
            "estimated_price": None,
            "original_price": PriceEstimator.original_price(product_composition(product)),
            "warnings": ["Metal and stone catalogs are not loaded — estimate unavailable."],
        }
    return result


@router.post("")
def create_customization_request(
    request: CustomizationRequestCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    product = _get_product_or_404(request.product_id, db)
    selection = request.selection.model_dump()
    result = estimate_for_product(product, selection, db)

    db_request = models.CustomizationRequest(
        user_id=current_user.id,
        product_id=product.id,
        name=request.name,
        email=request.email,
        phone=request.phone,
        customization_details=request.customization_details,
        preferred_budget=request.preferred_budget,
        timeline=request.timeline,
        selection_json=selection,
        estimated_price=result["estimated_price"] if result else None,
        estimate_json=result,
        status="new",
    )
    db.add(db_request)
    db.commit()
    db.refresh(db_request)

    if result and result["warnings"]:
        logger.warning("Customization request %s saved with estimate warnings: %s",
                       db_request.id, "; ".join(result["warnings"]))

    return {
        "success": True,
        "message": "Customization request created successfully",
        "request": _request_to_dict(db_request),
    }


@router.get("")
def list_customization_requests(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """Admins see every request; customers only their own."""
    query = db.query(models.CustomizationRequest)
    if not current_user.is_admin:
        query = query.filter(models.CustomizationRequest.user_id == current_user.id)
    requests = query.order_by(models.CustomizationRequest.created_at.desc()).all()
    return [_request_to_dict(r) for r in requests]


@router.get("/{request_id}")
def get_customization_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    req = _get_request_or_404(request_id, db)
    if not current_user.is_admin and req.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not your customization request")
    return _request_to_dict(req)


@router.patch("/{request_id}")
def update_customization_request(
    request_id: int,
    update: CustomizationRequestUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    req = _get_request_or_404(request_id, db)
    data = update.model_dump(exclude_unset=True)
    if "status" in data and data["status"] not in models.CUSTOMIZATION_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"status must be one of {models.CUSTOMIZATION_STATUSES}, got {data['status']}",
        )
    for field, value in data.items():
        setattr(req, field, value)
    db.commit()
    db.refresh(req)
    return _request_to_dict(req)
