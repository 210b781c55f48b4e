"""
Custom design requests — from-scratch pieces.

Workflow (admin moves it forward, customer pays the CAD fee via checkout):
    pending_acceptance → initial_estimate_requested → initial_estimate_provided
    → design_fee_paid → design_started → design_in_progress
    → design_ready_for_review → design_approved → final_estimate_provided

Sending a design back to design_in_progress after review counts as one
more iteration.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_current_user, require_admin
from ..database import get_db

router = APIRouter(prefix="/custom-designs", tags=["custom-designs"])


class DesignRequestCreate(BaseModel):
    full_name: str
    email: str
    phone: Optional[str] = None
    country: Optional[str] = None
    metal_type: str
    primary_stones: List[str] = []
    notes: Optional[str] = None
    image_urls: List[str] = []


class DesignRequestUpdate(BaseModel):
    status: Optional[str] = None
    initial_estimate: Optional[int] = None
    final_estimate: Optional[int] = None
    cad_image_url: Optional[str] = None


class CommentCreate(BaseModel):
    content: str
    image_urls: List[str] = []


def _comment_to_dict(c: models.DesignRequestComment) -> dict:
    return {
        "id": c.id,
        "content": c.content,
        "created_by": c.created_by,
        "is_admin": c.is_admin,
        "image_urls": c.image_urls or [],
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }


def _design_to_dict(d: models.DesignRequest, include_comments: bool = False) -> dict:
    result = {
        "id": d.id,
        "user_id": d.user_id,
        "full_name": d.full_name,
        "email": d.email,
        "phone": d.phone,
        "country": d.country,
        "metal_type": d.metal_type,
        "primary_stones": d.primary_stones or [],
        "notes": d.notes,
        "image_url": d.image_url,
        "image_urls": d.image_urls or [],
        "status": d.status,
        "consultation_fee_paid": d.consultation_fee_paid,
        "initial_estimate": d.initial_estimate,
        "final_estimate": d.final_estimate,
        "iterations_count": d.iterations_count,
        "cad_image_url": d.cad_image_url,
        "created_at": d.created_at.isoformat() if d.created_at else None,
    }
    if include_comments:
        result["comments"] = [_comment_to_dict(c) for c in d.comments]
    return result


def _get_owned_or_404(design_id: int, db: Session, user: models.User) -> models.DesignRequest:
    design = db.query(models.DesignRequest).filter(models.DesignRequest.id == design_id).first()
    if not design:
        raise HTTPException(status_code=404, detail="Design request not found")
    if not user.is_admin and design.user_id != user.id:
        raise HTTPException(status_code=403, detail="Unauthorized access to design request")
    return design


@router.post("")
def create_design_request(
    request: DesignRequestCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if not request.image_urls:
        raise HTTPException(status_code=400, detail="At least one reference image is required")

    design = models.DesignRequest(
        user_id=current_user.id,
        full_name=request.full_name,
        email=request.email,
        phone=request.phone,
        country=request.country,
        metal_type=request.metal_type,
        primary_stones=request.primary_stones,
        notes=request.notes,
        image_url=request.image_urls[0],
        image_urls=request.image_urls,
        status="pending_acceptance",
    )
    db.add(design)
    db.commit()
    db.refresh(design)
    return _design_to_dict(design)


@router.get("")
def list_design_requests(db: Session = Depends(get_db), admin: models.User = Depends(require_admin)):
    designs = db.query(models.DesignRequest).order_by(models.DesignRequest.created_at.desc()).all()
    return [_design_to_dict(d) for d in designs]


@router.get("/mine")
def list_my_design_requests(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    designs = db.query(models.DesignRequest).filter(
        models.DesignRequest.user_id == current_user.id,
    ).order_by(models.DesignRequest.created_at.desc()).all()
    return [_design_to_dict(d) for d in designs]


@router.get("/{design_id}")
def get_design_request(
    design_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    design = _get_owned_or_404(design_id, db, current_user)
    return _design_to_dict(design, include_comments=True)


@router.patch("/{design_id}")
def update_design_request(
    design_id: int,
    update: DesignRequestUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    design = _get_owned_or_404(design_id, db, admin)
    data = update.model_dump(exclude_unset=True)

    new_status = data.get("status")
    if new_status is not None:
        if new_status not in models.DESIGN_REQUEST_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"status must be one of {models.DESIGN_REQUEST_STATUSES}, got {new_status}",
            )
        if new_status == "design_in_progress" and design.status == "design_ready_for_review":
            design.iterations_count = (design.iterations_count or 0) + 1
        if new_status == "design_fee_paid":
            design.consultation_fee_paid = True

    for field, value in data.items():
        setattr(design, field, value)
    db.commit()
    db.refresh(design)
    return _design_to_dict(design)


@router.post("/{design_id}/comments")
def add_comment(
    design_id: int,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    design = _get_owned_or_404(design_id, db, current_user)
    if not comment.content.strip():
        raise HTTPException(status_code=400, detail="Comment content is required")

    db_comment = models.DesignRequestComment(
        design_request_id=design.id,
        content=comment.content,
        created_by=current_user.username,
        is_admin=current_user.is_admin,
        image_urls=comment.image_urls,
    )
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return _comment_to_dict(db_comment)


@router.get("/{design_id}/comments")
def list_comments(
    design_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    design = _get_owned_or_404(design_id, db, current_user)
    return [_comment_to_dict(c) for c in design.comments]
