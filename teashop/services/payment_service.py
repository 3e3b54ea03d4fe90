"""
Payment Service - Start a Mollie checkout for an order and poll its state
"""
from sqlalchemy.orm import Session
from typing import Dict, Optional
from uuid import UUID
import logging

from teashop.core.config import settings
from teashop.core.exceptions import OrderNotFound, OrderAlreadyPaid
from teashop.integrations.base import PaymentGateway
from teashop.models import PaymentStatus
from .order_service import OrderService

logger = logging.getLogger(__name__)


def build_redirect_url(order_number: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/order/confirmation?orderNumber={order_number}"


async def create_payment_for_order(
    db: Session,
    gateway: PaymentGateway,
    order_id: UUID,
    method: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    """Create the provider payment for a pending order and remember its id"""
    order = OrderService.get_order_by_id(db, order_id)
    if not order:
        raise OrderNotFound("Bestelling niet gevonden")

    if order.payment_status == PaymentStatus.PAID:
        raise OrderAlreadyPaid("Deze bestelling is al betaald")

    payment = await gateway.create_payment(
        amount=order.total,
        description=f"{settings.MAIL_FROM_NAME} - Bestelling {order.order_number}",
        order_id=str(order.id),
        redirect_url=build_redirect_url(order.order_number),
        method=method,
    )

    OrderService.set_payment_reference(db, order, payment.id)
    logger.info(f"Order {order.order_number} checkout started with payment {payment.id}")

    return {
        "payment_id": payment.id,
        "checkout_url": payment.checkout_url,
    }


def get_payment_status(db: Session, order_number: str) -> Dict[str, str]:
    """Order/payment status for the confirmation page poller"""
    order = OrderService.get_order_by_number(db, order_number)
    if not order:
        raise OrderNotFound("Bestelling niet gevonden")

    return {
        "payment_status": order.payment_status,
        "order_status": order.status,
    }
