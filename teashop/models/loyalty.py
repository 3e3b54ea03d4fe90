"""
Loyalty Models
"""
import enum
from sqlalchemy import Column, String, Integer, Boolean, Numeric, Text, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teashop.core import Base
from .base import UUIDMixin, TimestampMixin


class LoyaltyTier(str, enum.Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"


class LoyaltyTransactionType(str, enum.Enum):
    EARN = "EARN"
    REDEEM = "REDEEM"
    ADJUSTMENT = "ADJUSTMENT"


class RewardType(str, enum.Enum):
    DISCOUNT = "DISCOUNT"
    FREE_DRINK = "FREE_DRINK"
    FREE_TOPPING = "FREE_TOPPING"
    SIZE_UPGRADE = "SIZE_UPGRADE"


class LoyaltyTransaction(Base, UUIDMixin):
    """Loyalty point movement (append-only)"""
    __tablename__ = "loyalty_transactions"
    
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), index=True)
    
    points = Column(Integer, nullable=False)  # signed delta
    type = Column(SQLEnum(LoyaltyTransactionType, native_enum=False, length=20), nullable=False)
    description = Column(String(300))
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="loyalty_transactions")
    
    def __repr__(self):
        return f"<LoyaltyTransaction {self.type} {self.points:+d}>"


class Reward(Base, UUIDMixin, TimestampMixin):
    """Catalogue entry that can be bought with loyalty points"""
    __tablename__ = "rewards"
    
    slug = Column(String(100), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    
    points_cost = Column(Integer, nullable=False)
    reward_type = Column(SQLEnum(RewardType, native_enum=False, length=20), nullable=False)
    reward_value = Column(Numeric(10, 2), default=0)  # EUR
    is_available = Column(Boolean, default=True, nullable=False)
    
    def __repr__(self):
        return f"<Reward {self.slug} {self.points_cost}>"
