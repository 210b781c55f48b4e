"""
Public pricing tools.

POST /api/calculate-price — price a piece from metal weight + gems.
GET  /api/exchange-rate   — rates the storefront uses for display conversions.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import settings
from ..database import get_db
from ..jewelry_pricer import JewelryPricer

router = APIRouter(tags=["pricing"])


@router.post("/calculate-price")
def calculate_price(request: schemas.PriceCalculationRequest, db: Session = Depends(get_db)):
    if request.metal_type_id is None and not request.metal_type:
        raise HTTPException(status_code=400, detail="Missing required metal type information")

    metal_name = request.metal_type
    if request.metal_type_id is not None:
        metal = db.query(models.MetalType).filter(models.MetalType.id == request.metal_type_id).first()
        if not metal:
            raise HTTPException(status_code=404, detail="Metal type not found")
        metal_name = metal.name

    pricer = JewelryPricer(db.query(models.MetalType).all(), db.query(models.StoneType).all())
    result = pricer.calculate(
        metal_name,
        request.metal_weight,
        [gem.model_dump() for gem in request.gems],
        metal_type_id=request.metal_type_id,
    )
    return {
        "success": True,
        "product_type": request.product_type,
        "metal_type": metal_name,
        **result,
    }


@router.get("/exchange-rate")
def exchange_rate():
    return {
        "usd_to_inr": settings.USD_TO_INR_RATE,
        "stone_inr_per_usd": settings.EXCHANGE_RATE_INR_PER_USD,
    }
