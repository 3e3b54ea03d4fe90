# Payment Integrations Package
from .base import PaymentGateway, PaymentHandle
from .mollie import MolliePaymentGateway

__all__ = [
    "PaymentGateway",
    "PaymentHandle",
    "MolliePaymentGateway",
]
