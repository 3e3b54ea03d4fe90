from .base import TimestampMixin, UUIDMixin
from .loyalty import LoyaltyTransaction, LoyaltyTier, LoyaltyTransactionType, Reward, RewardType
from .user import User
from .order import Order, OrderItem, OrderStatus, PaymentStatus, FULFILLMENT_STATUSES
from .integration import WebhookLog

__all__ = [
    # Base
    "TimestampMixin", "UUIDMixin",
    # Loyalty
    "LoyaltyTransaction", "LoyaltyTier", "LoyaltyTransactionType", "Reward", "RewardType",
    # User
    "User",
    # Order
    "Order", "OrderItem", "OrderStatus", "PaymentStatus", "FULFILLMENT_STATUSES",
    # Integration
    "WebhookLog",
]
