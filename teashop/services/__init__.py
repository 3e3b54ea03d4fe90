# Services Package
from .order_service import OrderService
from .loyalty_service import LoyaltyService, calculate_loyalty_tier
from .notification_service import NotificationService, OrderConfirmation
from .payment_reconciler import PaymentReconciler, ReconcileResult
from . import payment_service
from . import webhook_log_service

__all__ = [
    "OrderService",
    "LoyaltyService",
    "calculate_loyalty_tier",
    "NotificationService",
    "OrderConfirmation",
    "PaymentReconciler",
    "ReconcileResult",
    "payment_service",
    "webhook_log_service",
]
