"""
POST /api/admin/generate-product-content — AI copy + computed price for a new
product. Multipart form: the product fields plus up to four photos.
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from .. import models
from ..auth import require_admin
from ..content_generator import ContentGenerator, MAX_IMAGES
from ..database import get_db
from ..jewelry_pricer import JewelryPricer

router = APIRouter(prefix="/admin", tags=["ai-content"])

MAX_IMAGE_BYTES = 10 * 1024 * 1024


@router.post("/generate-product-content")
async def generate_product_content(
    product_type: str = Form(...),
    metal_type: str = Form(...),
    metal_weight: float = Form(0.0),
    gems: str = Form("[]"),  # JSON list: [{"name": ..., "carats": ...}]
    user_description: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    try:
        gem_list = json.loads(gems or "[]")
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="gems must be a JSON list")
    if not isinstance(gem_list, list):
        raise HTTPException(status_code=400, detail="gems must be a JSON list")

    if len(images) > MAX_IMAGES:
        raise HTTPException(status_code=400, detail=f"At most {MAX_IMAGES} images are allowed")

    image_bytes = []
    for upload in images:
        if upload.content_type and not upload.content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image files are allowed")
        data = await upload.read()
        if len(data) > MAX_IMAGE_BYTES:
            raise HTTPException(status_code=400, detail=f"{upload.filename} is larger than 10MB")
        if data:
            image_bytes.append(data)

    pricer = JewelryPricer(db.query(models.MetalType).all(), db.query(models.StoneType).all())
    generator = ContentGenerator(pricer)
    inputs = {
        "product_type": product_type,
        "metal_type": metal_type,
        "metal_weight": metal_weight,
        "gems": gem_list,
        "user_description": user_description,
    }
    content = generator.generate(inputs, image_bytes)
    return {"success": True, "content": content, "ai_inputs": inputs}
