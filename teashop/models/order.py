"""
Order Models
"""
import enum
from sqlalchemy import Column, String, Numeric, Integer, DateTime, ForeignKey, Text, JSON, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from teashop.core import Base
from .base import UUIDMixin, TimestampMixin


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


# Statuses an order may hold once its payment is PAID
FULFILLMENT_STATUSES = (
    OrderStatus.PAID,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
)


class Order(Base, UUIDMixin, TimestampMixin):
    """Customer order placed at checkout"""
    __tablename__ = "orders"
    
    order_number = Column(String(30), unique=True, nullable=False, index=True)
    
    # Owner (NULL for guest checkout)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), index=True)
    
    # Customer contact
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(200), nullable=False)
    customer_phone = Column(String(30))
    pickup_time = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text)
    
    # Status
    status = Column(SQLEnum(OrderStatus, native_enum=False, length=20), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(SQLEnum(PaymentStatus, native_enum=False, length=20), default=PaymentStatus.PENDING, nullable=False)
    payment_reference = Column(String(100), index=True)  # Mollie payment id (tr_xxx)
    
    # Amounts
    subtotal = Column(Numeric(10, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0, nullable=False)
    total = Column(Numeric(10, 2), default=0, nullable=False)
    
    # Loyalty (fixed at creation, only ever reversed)
    points_earned = Column(Integer, default=0, nullable=False)
    points_redeemed = Column(Integer, default=0, nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.position")
    
    def __repr__(self):
        return f"<Order {self.order_number} {self.status} / {self.payment_status}>"


class OrderItem(Base, UUIDMixin):
    """Order line - product snapshot at time of purchase"""
    __tablename__ = "order_items"
    
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, default=0, nullable=False)
    
    product_id = Column(String(100), nullable=False)
    product_name = Column(String(300), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    customizations = Column(JSON)  # {sugarLevel, iceLevel, toppings: [{name}]}
    
    # Relationships
    order = relationship("Order", back_populates="items")
