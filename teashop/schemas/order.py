"""
Order Schemas
"""
from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from teashop.models.order import OrderStatus, PaymentStatus

class OrderItemCreate(BaseModel):
    product_id: str
    product_name: str
    quantity: int = Field(1, gt=0)
    unit_price: Decimal = Field(..., gt=0)
    customizations: Optional[Dict[str, Any]] = None

class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)
    
    customer_name: str
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    pickup_time: datetime
    notes: Optional[str] = None
    
    # Signed-in checkout
    user_id: Optional[UUID] = None
    points_to_redeem: int = Field(0, ge=0)

class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    customizations: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    customer_name: str
    customer_email: str
    pickup_time: datetime
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal
    points_earned: int
    points_redeemed: int
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True
