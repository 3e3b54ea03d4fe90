"""
Loyalty Schemas
"""
from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from uuid import UUID

from teashop.models.loyalty import LoyaltyTier, LoyaltyTransactionType, RewardType

class LoyaltyTransactionResponse(BaseModel):
    id: UUID
    order_id: Optional[UUID] = None
    points: int
    type: LoyaltyTransactionType
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class LoyaltySummary(BaseModel):
    user_id: UUID
    loyalty_points: int
    loyalty_tier: LoyaltyTier
    transactions: List[LoyaltyTransactionResponse] = []

class RewardResponse(BaseModel):
    id: UUID
    slug: str
    name: str
    description: Optional[str] = None
    points_cost: int
    reward_type: RewardType
    reward_value: Decimal

    class Config:
        from_attributes = True

class RewardRedeem(BaseModel):
    user_id: UUID

class RewardRedemptionResponse(BaseModel):
    message: str
    new_points: int
    new_tier: LoyaltyTier
    reward: RewardResponse
