"""
Payment Schemas
"""
from pydantic import BaseModel
from typing import Optional
from uuid import UUID

from teashop.models.order import OrderStatus, PaymentStatus

class PaymentCreate(BaseModel):
    order_id: UUID
    method: Optional[str] = None  # bancontact, ideal, creditcard, paypal

class PaymentCreateResponse(BaseModel):
    payment_id: str
    checkout_url: Optional[str] = None

class PaymentStatusResponse(BaseModel):
    payment_status: PaymentStatus
    order_status: OrderStatus
