"""
Payment Reconciler - Applies Mollie payment status changes to orders

Invoked once per webhook delivery. Mollie delivers at least once, so every
branch is written to be replayed: the order's payment status is moved with a
conditional UPDATE and loyalty side effects only run for the delivery that
actually moved it.

Only the provider and mail calls run on the event loop; database work goes
through the thread pool like the webhook log writes.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from teashop.core.exceptions import (
    DeliveryError,
    InsufficientPoints,
    MissingInput,
    OrderNotFound,
    PersistenceError,
    TeashopError,
)
from teashop.integrations.base import PaymentGateway, STATUS_PAID, FAILED_STATUSES
from teashop.models import Order, OrderStatus, PaymentStatus
from .loyalty_service import LoyaltyService
from .notification_service import NotificationService, OrderConfirmation
from .order_service import OrderService

logger = logging.getLogger(__name__)


# Reconcile outcomes
RESULT_PAID = "PAID"
RESULT_CANCELLED = "CANCELLED"
RESULT_DUPLICATE = "DUPLICATE"
RESULT_IGNORED = "IGNORED"


@dataclass
class ReconcileResult:
    result: str
    order_number: Optional[str] = None
    payment_status: Optional[str] = None  # provider status as fetched
    points_awarded: int = 0
    points_restored: int = 0
    notification_sent: bool = False


class PaymentReconciler:
    """Reconciles one payment notification against the order store"""

    def __init__(self, db: Session, gateway: PaymentGateway, notifier: Optional[NotificationService] = None):
        self.db = db
        self.gateway = gateway
        self.notifier = notifier

    async def reconcile(self, payment_id: Optional[str]) -> ReconcileResult:
        if not payment_id or not payment_id.strip():
            raise MissingInput("Missing payment ID")
        payment_id = payment_id.strip()

        # Webhook body only carries the id; status comes from the provider
        payment = await self.gateway.get_payment(payment_id)

        order = await run_in_threadpool(self._resolve_order, payment.order_id)
        if not order:
            raise OrderNotFound(f"No order for payment {payment_id} (orderId={payment.order_id!r})")

        if payment.status == STATUS_PAID:
            result = await run_in_threadpool(self._apply_paid, order, payment_id)
            result.payment_status = payment.status
            if result.result == RESULT_PAID:
                result.notification_sent = await self._notify(order, result.order_number)
            return result

        if payment.status in FAILED_STATUSES:
            if order.payment_reference and order.payment_reference != payment_id:
                # An older attempt expiring must not cancel the order
                logger.info(f"Payment {payment_id} was superseded by {order.payment_reference} for order {order.order_number}, ignoring '{payment.status}'")
                return ReconcileResult(result=RESULT_IGNORED, order_number=order.order_number, payment_status=payment.status)
            result = await run_in_threadpool(self._apply_failed, order, payment_id)
            result.payment_status = payment.status
            return result

        logger.info(f"Payment {payment_id} for order {order.order_number} is '{payment.status}', nothing to do")
        return ReconcileResult(result=RESULT_IGNORED, order_number=order.order_number, payment_status=payment.status)

    def _resolve_order(self, order_id: Optional[str]) -> Optional[Order]:
        if not order_id:
            return None
        try:
            key = UUID(str(order_id))
        except ValueError:
            logger.warning(f"Payment metadata carries malformed orderId {order_id!r}")
            return None
        return OrderService.get_order_by_id(self.db, key)

    def _apply_paid(self, order: Order, payment_id: str) -> ReconcileResult:
        try:
            previous = OrderService.transition_payment(
                self.db,
                order,
                allowed_from=(PaymentStatus.PENDING, PaymentStatus.FAILED),
                payment_status=PaymentStatus.PAID,
                status=OrderStatus.PAID,
                payment_reference=payment_id,
            )
            if previous is None:
                self.db.rollback()
                logger.info(f"Order {order.order_number} already {order.payment_status.value}, skipping paid notification {payment_id}")
                return ReconcileResult(result=RESULT_DUPLICATE, order_number=order.order_number)

            awarded = 0
            if order.user_id:
                user = LoyaltyService.get_user_for_update(self.db, order.user_id)
                if user is None:
                    logger.warning(f"Order {order.order_number} owner {order.user_id} no longer exists, no points")
                else:
                    # Points handed back on an earlier cancel are taken again
                    if previous == PaymentStatus.FAILED and order.points_redeemed > 0:
                        try:
                            LoyaltyService.redeem(
                                self.db, user, order.points_redeemed,
                                f"Bestelling {order.order_number} alsnog betaald",
                                order_id=order.id,
                            )
                        except InsufficientPoints:
                            logger.warning(f"Order {order.order_number}: user {user.id} no longer holds {order.points_redeemed} points to re-redeem")
                    if order.points_earned > 0:
                        LoyaltyService.earn(
                            self.db, user, order.points_earned,
                            f"Bestelling {order.order_number}",
                            order_id=order.id,
                        )
                        awarded = order.points_earned

            self.db.commit()
        except TeashopError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to mark order {order.order_number} paid: {e}")
            raise PersistenceError(f"Could not update order {order.order_number}: {e}") from e

        logger.info(f"Order {order.order_number} paid via {payment_id}, {awarded} points awarded")
        return ReconcileResult(result=RESULT_PAID, order_number=order.order_number, points_awarded=awarded)

    def _apply_failed(self, order: Order, payment_id: str) -> ReconcileResult:
        try:
            previous = OrderService.transition_payment(
                self.db,
                order,
                allowed_from=(PaymentStatus.PENDING,),
                payment_status=PaymentStatus.FAILED,
                status=OrderStatus.CANCELLED,
                payment_reference=payment_id,
            )
            if previous is None:
                self.db.rollback()
                logger.info(f"Order {order.order_number} already {order.payment_status.value}, skipping failed notification {payment_id}")
                return ReconcileResult(result=RESULT_DUPLICATE, order_number=order.order_number)

            restored = 0
            if order.user_id and order.points_redeemed > 0:
                user = LoyaltyService.get_user_for_update(self.db, order.user_id)
                if user is None:
                    logger.warning(f"Order {order.order_number} owner {order.user_id} no longer exists, nothing to restore")
                else:
                    LoyaltyService.restore(
                        self.db, user, order.points_redeemed,
                        f"Bestelling {order.order_number} geannuleerd",
                        order_id=order.id,
                    )
                    restored = order.points_redeemed

            self.db.commit()
        except TeashopError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to cancel order {order.order_number}: {e}")
            raise PersistenceError(f"Could not update order {order.order_number}: {e}") from e

        logger.info(f"Order {order.order_number} cancelled via {payment_id}, {restored} points restored")
        return ReconcileResult(result=RESULT_CANCELLED, order_number=order.order_number, points_restored=restored)

    def _load_confirmation(self, order: Order) -> OrderConfirmation:
        self.db.refresh(order)
        return OrderConfirmation.from_order(order)

    async def _notify(self, order: Order, order_number: str) -> bool:
        """Best-effort confirmation mail; never fails the reconciliation"""
        if self.notifier is None:
            return False
        try:
            confirmation = await run_in_threadpool(self._load_confirmation, order)
            return await self.notifier.send_order_confirmation(confirmation)
        except DeliveryError as e:
            logger.error(f"Order confirmation for {order_number} not delivered: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error sending confirmation for {order_number}: {e}")
        return False
