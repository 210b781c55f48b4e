"""
Orders — direct product purchase and admin order management.

Every order is split into an advance (charged up front, 50% by default) and
a balance due before shipping.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_current_user, require_admin
from ..config import settings
from ..database import get_db
from ..price_estimator import round_half_up

router = APIRouter(tags=["orders"])


def advance_split(total: int) -> tuple:
    """(advance, balance) — advance rounded, balance takes the remainder."""
    advance = round_half_up(total * settings.ADVANCE_PAYMENT_PCT / 100.0)
    return advance, total - advance


def product_price(product: models.Product, currency: str) -> int:
    """Catalog price in the requested currency, base price when not calculated."""
    if currency == "INR":
        price = product.calculated_price_inr or product.base_price
    else:
        price = product.calculated_price_usd or product.base_price
    return round_half_up(price)


class OrderCreate(BaseModel):
    product_id: int
    name: str
    email: str
    phone: str
    address: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str
    additional_notes: Optional[str] = None
    payment_method: str = "paypal"
    currency: str = "USD"
    metal_type_id: Optional[int] = None
    stone_type_id: Optional[int] = None


class OrderUpdate(BaseModel):
    order_status: Optional[str] = None
    payment_status: Optional[str] = None


def order_to_dict(o: models.Order) -> dict:
    return {
        "id": o.id,
        "user_id": o.user_id,
        "customer_name": o.customer_name,
        "customer_email": o.customer_email,
        "customer_phone": o.customer_phone,
        "shipping_address": o.shipping_address,
        "special_instructions": o.special_instructions,
        "currency": o.currency,
        "total_amount": o.total_amount,
        "advance_amount": o.advance_amount,
        "balance_amount": o.balance_amount,
        "payment_status": o.payment_status,
        "order_status": o.order_status,
        "payment_method": o.payment_method,
        "payment_id": o.payment_id,
        "created_at": o.created_at.isoformat() if o.created_at else None,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product.name if i.product else None,
                "metal_type_id": i.metal_type_id,
                "stone_type_id": i.stone_type_id,
                "price": i.price,
                "currency": i.currency,
                "is_custom_design": i.is_custom_design,
                "design_request_id": i.design_request_id,
            }
            for i in o.items
        ],
    }


def _get_order_or_404(order_id: int, db: Session) -> models.Order:
    order = db.query(models.Order).filter(models.Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/orders")
def create_order(
    request: OrderCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if request.currency not in models.SUPPORTED_CURRENCIES:
        raise HTTPException(status_code=400, detail="Currency must be USD or INR")

    product = db.query(models.Product).filter(models.Product.id == request.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    price = product_price(product, request.currency)
    advance, balance = advance_split(price)

    order = models.Order(
        user_id=current_user.id,
        customer_name=request.name,
        customer_email=request.email,
        customer_phone=request.phone,
        shipping_address={
            "address": request.address,
            "city": request.city,
            "state": request.state,
            "postal_code": request.postal_code,
            "country": request.country,
        },
        special_instructions=request.additional_notes or "",
        currency=request.currency,
        total_amount=price,
        advance_amount=advance,
        balance_amount=balance,
        payment_method=request.payment_method,
        payment_status="pending",
        order_status="new",
    )
    db.add(order)
    db.flush()

    db.add(models.OrderItem(
        order_id=order.id,
        product_id=product.id,
        metal_type_id=request.metal_type_id,
        stone_type_id=request.stone_type_id,
        price=price,
        currency=request.currency,
    ))
    db.commit()
    db.refresh(order)
    return order_to_dict(order)


@router.get("/orders/mine")
def list_my_orders(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    orders = db.query(models.Order).filter(
        models.Order.user_id == current_user.id,
    ).order_by(models.Order.created_at.desc()).all()
    return [order_to_dict(o) for o in orders]


@router.get("/orders/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    order = _get_order_or_404(order_id, db)
    if not current_user.is_admin and order.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not your order")
    return order_to_dict(order)


@router.get("/admin/orders")
def admin_list_orders(
    order_status: Optional[str] = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    query = db.query(models.Order)
    if order_status:
        query = query.filter(models.Order.order_status == order_status)
    orders = query.order_by(models.Order.created_at.desc()).offset(skip).limit(limit).all()
    return [order_to_dict(o) for o in orders]


@router.patch("/admin/orders/{order_id}")
def admin_update_order(
    order_id: int,
    update: OrderUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    order = _get_order_or_404(order_id, db)
    data = update.model_dump(exclude_unset=True)
    if "order_status" in data and data["order_status"] not in models.ORDER_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"order_status must be one of {models.ORDER_STATUSES}, got {data['order_status']}",
        )
    if "payment_status" in data and data["payment_status"] not in models.PAYMENT_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"payment_status must be one of {models.PAYMENT_STATUSES}, got {data['payment_status']}",
        )
    for field, value in data.items():
        setattr(order, field, value)
    if data.get("payment_status") == "full_paid":
        order.balance_amount = 0
    db.commit()
    db.refresh(order)
    return order_to_dict(order)
