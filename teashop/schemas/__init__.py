# Pydantic Schemas Package
from .order import OrderCreate, OrderItemCreate, OrderResponse, OrderItemResponse
from .payment import PaymentCreate, PaymentCreateResponse, PaymentStatusResponse
from .loyalty import (
    LoyaltySummary, LoyaltyTransactionResponse,
    RewardResponse, RewardRedeem, RewardRedemptionResponse,
)

__all__ = [
    "OrderCreate", "OrderItemCreate", "OrderResponse", "OrderItemResponse",
    "PaymentCreate", "PaymentCreateResponse", "PaymentStatusResponse",
    "LoyaltySummary", "LoyaltyTransactionResponse",
    "RewardResponse", "RewardRedeem", "RewardRedemptionResponse",
]
