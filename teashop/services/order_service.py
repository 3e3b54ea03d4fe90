"""
Order Service - Business Logic for Orders
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable, Optional
from uuid import UUID
from datetime import datetime
from decimal import Decimal, ROUND_FLOOR
import logging
import secrets
import string
import time

from teashop.core.exceptions import MissingInput, PersistenceError, UserNotFound, TeashopError
from teashop.models import Order, OrderItem, OrderStatus, PaymentStatus
from teashop.schemas.order import OrderCreate
from .loyalty_service import LoyaltyService

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "YBT"
POINTS_PER_EURO = 10
POINT_VALUE = Decimal("0.01")  # 100 points = EUR 1.00 off

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_order_number() -> str:
    """YBT-<ms timestamp base36>-<4 random chars>"""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{ORDER_NUMBER_PREFIX}-{timestamp}-{suffix}"


def calculate_points_earned(total: Decimal) -> int:
    """10 points per euro spent, rounded down"""
    return int((Decimal(total) * POINTS_PER_EURO).to_integral_value(rounding=ROUND_FLOOR))


class OrderService:
    """Order business logic"""

    @staticmethod
    def get_order_by_id(db: Session, order_id: UUID) -> Optional[Order]:
        """Get order by ID"""
        return db.query(Order).filter(Order.id == order_id).first()

    @staticmethod
    def get_order_by_number(db: Session, order_number: str) -> Optional[Order]:
        """Get order by human readable order number"""
        return db.query(Order).filter(Order.order_number == order_number).first()

    @staticmethod
    def create_order(db: Session, order_data: OrderCreate) -> Order:
        """Create order at checkout, redeeming points when requested"""
        subtotal = sum(
            (Decimal(item.unit_price) * item.quantity for item in order_data.items),
            Decimal("0"),
        )

        user = None
        points_redeemed = 0
        discount = Decimal("0")

        if order_data.user_id:
            user = LoyaltyService.get_user_for_update(db, order_data.user_id)
            if not user:
                raise UserNotFound(f"User {order_data.user_id} not found")

        if order_data.points_to_redeem:
            if not user:
                raise MissingInput("Inloggen vereist om punten in te wisselen")

            # Never discount below zero
            max_points = int(subtotal / POINT_VALUE)
            points_redeemed = min(order_data.points_to_redeem, max_points)
            discount = (POINT_VALUE * points_redeemed).quantize(Decimal("0.01"))

        total = subtotal - discount

        order = Order(
            order_number=generate_order_number(),
            user_id=order_data.user_id,
            customer_name=order_data.customer_name,
            customer_email=order_data.customer_email,
            customer_phone=order_data.customer_phone,
            pickup_time=order_data.pickup_time,
            notes=order_data.notes,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            subtotal=subtotal,
            discount_amount=discount,
            total=total,
            points_earned=calculate_points_earned(total),
            points_redeemed=points_redeemed,
        )

        for position, item_data in enumerate(order_data.items):
            order.items.append(OrderItem(
                position=position,
                product_id=item_data.product_id,
                product_name=item_data.product_name,
                quantity=item_data.quantity,
                unit_price=item_data.unit_price,
                total_price=Decimal(item_data.unit_price) * item_data.quantity,
                customizations=item_data.customizations,
            ))

        try:
            db.add(order)
            db.flush()

            if points_redeemed:
                LoyaltyService.redeem(
                    db, user, points_redeemed,
                    f"Ingewisseld bij bestelling {order.order_number}",
                    order_id=order.id,
                )

            db.commit()
        except TeashopError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create order: {e}")
            raise PersistenceError(f"Could not store order: {e}") from e

        db.refresh(order)
        logger.info(f"Created order {order.order_number} total={order.total} points_earned={order.points_earned} points_redeemed={order.points_redeemed}")
        return order

    @staticmethod
    def set_payment_reference(db: Session, order: Order, payment_reference: str) -> Order:
        """Remember the provider payment id created for this order"""
        order.payment_reference = payment_reference
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Could not store payment reference: {e}") from e
        db.refresh(order)
        return order

    @staticmethod
    def transition_payment(
        db: Session,
        order: Order,
        allowed_from: Iterable[PaymentStatus],
        payment_status: PaymentStatus,
        status: OrderStatus,
        payment_reference: Optional[str] = None,
    ) -> Optional[PaymentStatus]:
        """
        Conditional update of the payment state

        The UPDATE only matches while the row still holds the payment status
        read here, so of two concurrent deliveries exactly one wins.
        Returns the previous payment status when this call won, None when the
        order is not (or no longer) in one of `allowed_from`. Does not commit.
        """
        allowed_from = tuple(allowed_from)

        for _ in range(3):
            db.refresh(order)
            current = order.payment_status
            if current not in allowed_from:
                return None

            values = {
                Order.payment_status: payment_status,
                Order.status: status,
                Order.updated_at: datetime.utcnow(),
            }
            if payment_reference:
                values[Order.payment_reference] = payment_reference

            matched = db.query(Order).filter(
                Order.id == order.id,
                Order.payment_status == current,
            ).update(values, synchronize_session=False)

            if matched == 1:
                db.expire(order)
                logger.info(f"Order {order.order_number}: payment {current.value} -> {payment_status.value}, status -> {status.value}")
                return current

            logger.warning(f"Order {order.order_number}: payment status changed concurrently, re-reading")

        return None
