"""
PayPal checkout.

Flow:
1. POST /payment/create-paypal-order — prices the items server-side, stores a
   pending Order, creates the PayPal order for the amount due now.
2. Buyer approves in the PayPal popup.
3. POST /payment/capture-paypal-order — captures, marks the Order paid.

Product orders charge the advance (ADVANCE_PAYMENT_PCT of items + shipping);
the balance is collected before shipping. A design consultation fee is
charged in full and has no shipping.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import models, paypal_client
from ..auth import get_optional_user
from ..config import settings
from ..database import get_db
from ..price_estimator import round_half_up
from .orders import advance_split, order_to_dict, product_price

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["payment"])

CURRENCY_COUNTRY = {"USD": "US", "INR": "IN"}


class CheckoutItem(BaseModel):
    product_id: Optional[int] = None
    design_request_id: Optional[int] = None
    is_custom_design: bool = False
    metal_type_id: Optional[int] = None
    stone_type_id: Optional[int] = None


class ShippingAddress(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


class CreatePayPalOrderRequest(BaseModel):
    items: List[CheckoutItem]
    currency: str = "USD"
    shipping_address: ShippingAddress = ShippingAddress()
    special_instructions: Optional[str] = None


class PayPalOrderRef(BaseModel):
    order_id: str


def consultation_fee(currency: str) -> int:
    if currency == "INR":
        return round_half_up(settings.CONSULTATION_FEE_USD * settings.USD_TO_INR_RATE)
    return settings.CONSULTATION_FEE_USD


def shipping_cost(currency: str) -> int:
    return settings.SHIPPING_INR if currency == "INR" else settings.SHIPPING_USD


def _is_consultation(items: List[CheckoutItem]) -> bool:
    return any(i.is_custom_design or i.design_request_id for i in items)


def _paypal_call(fn, *args):
    """Map PayPal client failures to HTTP errors at the router seam."""
    try:
        return fn(*args)
    except paypal_client.PayPalNotConfigured:
        raise HTTPException(status_code=503, detail="PayPal is not configured")
    except paypal_client.PayPalError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/paypal-client-id")
def paypal_client_id():
    if not settings.PAYPAL_CLIENT_ID:
        raise HTTPException(status_code=503, detail="PayPal is not configured")
    return {"client_id": settings.PAYPAL_CLIENT_ID, "mode": settings.PAYPAL_MODE}


@router.post("/create-paypal-order")
def create_paypal_order(
    request: CreatePayPalOrderRequest,
    db: Session = Depends(get_db),
    current_user: Optional[models.User] = Depends(get_optional_user),
):
    if not request.items:
        raise HTTPException(status_code=400, detail="Invalid cart items")
    currency = request.currency
    if currency not in models.SUPPORTED_CURRENCIES:
        raise HTTPException(status_code=400, detail="Currency must be USD or INR")

    is_consultation = _is_consultation(request.items)
    address = request.shipping_address
    if not is_consultation:
        if not address.country:
            raise HTTPException(status_code=400, detail="Shipping address is required for product orders")
        if address.country != CURRENCY_COUNTRY[currency]:
            raise HTTPException(
                status_code=400,
                detail="Currency and shipping country mismatch. USD for US addresses and INR for India addresses only.",
            )

    order_items = []
    item_total = 0
    for item in request.items:
        if item.design_request_id:
            design = db.query(models.DesignRequest).filter(models.DesignRequest.id == item.design_request_id).first()
            if not design:
                raise HTTPException(status_code=404, detail=f"Design request not found: {item.design_request_id}")
            price = consultation_fee(currency)
        else:
            product = db.query(models.Product).filter(models.Product.id == item.product_id).first()
            if not product:
                raise HTTPException(status_code=404, detail=f"Product not found: {item.product_id}")
            price = product_price(product, currency)

        item_total += price
        order_items.append(models.OrderItem(
            product_id=item.product_id,
            metal_type_id=item.metal_type_id,
            stone_type_id=item.stone_type_id,
            price=price,
            currency=currency,
            is_custom_design=bool(item.is_custom_design or item.design_request_id),
            design_request_id=item.design_request_id,
        ))

    if is_consultation:
        total = item_total
        advance, balance = total, 0
    else:
        total = item_total + shipping_cost(currency)
        advance, balance = advance_split(total)

    order = models.Order(
        user_id=current_user.id if current_user else None,
        customer_name=address.name or (current_user.username if current_user else "Guest User"),
        customer_email=address.email or (current_user.email if current_user else ""),
        customer_phone=address.phone,
        shipping_address=address.model_dump(),
        special_instructions=request.special_instructions or "",
        currency=currency,
        total_amount=total,
        advance_amount=advance,
        balance_amount=balance,
        payment_method="paypal",
        payment_status="pending",
        order_status="new",
        items=order_items,
    )
    db.add(order)
    db.flush()

    description = "design consultation & CAD fee" if is_consultation else f"Advance payment for order #{order.id}"
    paypal_order = _paypal_call(paypal_client.create_order, advance, currency, f"order-{order.id}", description)

    order.payment_id = paypal_order["id"]
    db.commit()
    db.refresh(order)
    logger.info("Created PayPal order %s for local order %s (%s %s)", order.payment_id, order.id, advance, currency)

    return {
        "order_id": paypal_order["id"],
        "local_order_id": order.id,
        "amount_due_now": advance,
        "item_total": item_total,
        "shipping": 0 if is_consultation else shipping_cost(currency),
        "total": total,
        "currency": currency,
    }


def _pending_order_or_404(paypal_order_id: str, db: Session) -> models.Order:
    order = db.query(models.Order).filter(models.Order.payment_id == paypal_order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found for this PayPal order")
    return order


@router.post("/capture-paypal-order")
def capture_paypal_order(request: PayPalOrderRef, db: Session = Depends(get_db)):
    order = _pending_order_or_404(request.order_id, db)
    if order.payment_status != "pending":
        raise HTTPException(status_code=409, detail="Order has already been captured")

    capture = _paypal_call(paypal_client.capture_order, request.order_id)
    if capture.get("status") != "COMPLETED":
        raise HTTPException(status_code=402, detail=f"Payment not completed (status: {capture.get('status')})")

    order.payment_status = "full_paid" if order.balance_amount == 0 else "advance_paid"
    order.order_status = "processing"

    for item in order.items:
        if item.design_request_id:
            design = db.query(models.DesignRequest).filter(models.DesignRequest.id == item.design_request_id).first()
            if design:
                design.consultation_fee_paid = True
                design.status = "design_fee_paid"
                logger.info("Design consultation fee paid for request #%s", design.id)

    db.commit()
    db.refresh(order)
    return {"success": True, "order": order_to_dict(order)}


@router.post("/cancel-paypal-order")
def cancel_paypal_order(request: PayPalOrderRef, db: Session = Depends(get_db)):
    order = _pending_order_or_404(request.order_id, db)
    if order.payment_status != "pending":
        raise HTTPException(status_code=409, detail="Captured orders can't be cancelled here")
    order.order_status = "cancelled"
    db.commit()
    return {"success": True, "order_id": order.id}
