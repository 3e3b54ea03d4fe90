"""
API Router - JSON Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from uuid import UUID
from datetime import datetime
from typing import List

from teashop import __version__
from teashop.core import get_db
from teashop.core.exceptions import TeashopError, GatewayError
from teashop.integrations import PaymentGateway
from teashop.models import User, LoyaltyTransactionType
from teashop.services import OrderService, LoyaltyService, payment_service
from teashop.schemas.order import OrderCreate, OrderResponse
from teashop.schemas.payment import PaymentCreate, PaymentCreateResponse, PaymentStatusResponse
from teashop.schemas.loyalty import (
    LoyaltySummary,
    LoyaltyTransactionResponse,
    RewardResponse,
    RewardRedeem,
    RewardRedemptionResponse,
)

# Import sub-routers
from teashop.api.webhooks import webhook_router
from .deps import get_payment_gateway

api_router = APIRouter(tags=["API"])

# Include sub-routers
api_router.include_router(webhook_router)

# ===================== HEALTH & STATUS =====================

@api_router.get("/status")
async def api_status():
    return {"status": "ok", "version": __version__, "timestamp": datetime.now().isoformat()}

# ===================== ORDERS =====================

@api_router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(order_data: OrderCreate, db: Session = Depends(get_db)):
    try:
        return OrderService.create_order(db, order_data)
    except TeashopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

@api_router.get("/orders/{order_number}")
def get_order(order_number: str, db: Session = Depends(get_db)):
    """Confirmation page view of an order"""
    order = OrderService.get_order_by_number(db, order_number)
    if not order:
        raise HTTPException(status_code=404, detail="Bestelling niet gevonden")

    return {
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "pickup_time": order.pickup_time,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "total": float(order.total),
        "points_earned": order.points_earned,
        "items": [
            {
                "name": item.product_name,
                "quantity": item.quantity,
                "price": float(item.unit_price),
                "customizations": item.customizations,
            }
            for item in order.items
        ],
    }

# ===================== PAYMENTS =====================

@api_router.post("/payments", response_model=PaymentCreateResponse)
async def create_payment(
    data: PaymentCreate,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    try:
        return await payment_service.create_payment_for_order(db, gateway, data.order_id, data.method)
    except GatewayError:
        raise HTTPException(status_code=502, detail="Er is een fout opgetreden bij het aanmaken van de betaling")
    except TeashopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

@api_router.get("/payments/status/{order_number}", response_model=PaymentStatusResponse)
def get_payment_status(order_number: str, db: Session = Depends(get_db)):
    try:
        return payment_service.get_payment_status(db, order_number)
    except TeashopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

# ===================== LOYALTY =====================

@api_router.get("/loyalty/{user_id}", response_model=LoyaltySummary)
def get_loyalty(
    user_id: UUID,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Gebruiker niet gevonden")

    return {
        "user_id": user.id,
        "loyalty_points": user.loyalty_points,
        "loyalty_tier": user.loyalty_tier,
        "transactions": LoyaltyService.get_history(db, user.id, limit=limit),
    }

@api_router.get("/loyalty/{user_id}/redemptions", response_model=List[LoyaltyTransactionResponse])
def get_redemptions(user_id: UUID, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Gebruiker niet gevonden")

    return LoyaltyService.get_history(db, user.id, tx_type=LoyaltyTransactionType.REDEEM)

# ===================== REWARDS =====================

@api_router.get("/rewards", response_model=List[RewardResponse])
def list_rewards(db: Session = Depends(get_db)):
    return LoyaltyService.get_rewards(db)

@api_router.post("/rewards/{reward_id}/redeem", response_model=RewardRedemptionResponse)
def redeem_reward(reward_id: UUID, data: RewardRedeem, db: Session = Depends(get_db)):
    try:
        user, reward, _ = LoyaltyService.redeem_reward(db, data.user_id, reward_id)
    except TeashopError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {
        "message": f'Je hebt "{reward.name}" ingewisseld!',
        "new_points": user.loyalty_points,
        "new_tier": user.loyalty_tier,
        "reward": reward,
    }
