"""
Payment Gateway Port - Abstract base class for payment provider integrations
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Dict, Any


# Provider statuses the reconciler acts on
STATUS_PAID = "paid"
STATUS_FAILED = "failed"
STATUS_CANCELED = "canceled"
STATUS_EXPIRED = "expired"

FAILED_STATUSES = (STATUS_FAILED, STATUS_CANCELED, STATUS_EXPIRED)


@dataclass
class PaymentHandle:
    """
    Normalized payment object returned by every gateway
    """
    id: str
    status: str  # open, pending, authorized, paid, failed, canceled, expired
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    checkout_url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    raw_payload: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def order_id(self) -> Optional[str]:
        return self.metadata.get("orderId") if self.metadata else None


class PaymentGateway(ABC):
    """
    Abstract base class for payment providers
    """
    PROVIDER_NAME: str = "base"
    
    @abstractmethod
    async def create_payment(
        self,
        amount: Decimal,
        description: str,
        order_id: str,
        redirect_url: str,
        method: Optional[str] = None,
    ) -> PaymentHandle:
        """
        Create a payment for an order
        Not idempotent: calling twice creates two payments
        """
        pass
    
    @abstractmethod
    async def get_payment(self, payment_id: str) -> PaymentHandle:
        """
        Fetch the authoritative payment state
        """
        pass
