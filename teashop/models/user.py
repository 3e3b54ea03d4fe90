"""
User Models (loyalty slice)
"""
from sqlalchemy import Column, String, Integer, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from teashop.core import Base
from .base import UUIDMixin, TimestampMixin
from .loyalty import LoyaltyTier

class User(Base, UUIDMixin, TimestampMixin):
    """Registered customer"""
    __tablename__ = "users"
    
    email = Column(String(200), unique=True, nullable=False)
    name = Column(String(200))
    
    # Cached aggregate of loyalty_transactions.points
    loyalty_points = Column(Integer, default=0, nullable=False)
    loyalty_tier = Column(SQLEnum(LoyaltyTier, native_enum=False, length=10), default=LoyaltyTier.BRONZE, nullable=False)
    
    # Relationships
    orders = relationship("Order", back_populates="user")
    loyalty_transactions = relationship("LoyaltyTransaction", back_populates="user")
    
    __table_args__ = (
        CheckConstraint("loyalty_points >= 0", name="ck_users_loyalty_points_non_negative"),
    )
