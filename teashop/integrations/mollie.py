"""
Mollie Payments Client
API Documentation: https://docs.mollie.com/reference/v2/payments-api
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any
import httpx
import logging

from teashop.core.exceptions import GatewayError, GatewayConfigError, PaymentNotFound
from .base import PaymentGateway, PaymentHandle

logger = logging.getLogger(__name__)


class MolliePaymentGateway(PaymentGateway):
    """
    Mollie v2 REST API Client
    """
    PROVIDER_NAME = "mollie"
    
    BASE_URL = "https://api.mollie.com/v2"
    
    def __init__(
        self,
        api_key: str,
        webhook_url: str,
        base_url: Optional[str] = None,
        currency: str = "EUR",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise GatewayConfigError("MOLLIE_API_KEY is not set")
        
        self.api_key = api_key
        self.webhook_url = webhook_url
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self._http_client = http_client
    
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
    
    def _log_api_call(self, method: str, path: str, status_code: int):
        logger.debug(f"Mollie API {method} {path} -> {status_code}")
    
    @staticmethod
    def format_amount(amount: Decimal) -> str:
        """Mollie wants a string with exactly two decimals"""
        return str(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    
    async def _request(self, method: str, path: str, json: Dict[str, Any] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._http_client is not None:
                response = await self._http_client.request(method, url, headers=self._headers(), json=json)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, headers=self._headers(), json=json)
        except httpx.HTTPError as e:
            logger.error(f"Mollie API {method} {path} transport error: {e}")
            raise GatewayError(f"Mollie request failed: {e}") from e
        
        self._log_api_call(method, path, response.status_code)
        return response
    
    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return data.get("detail") or data.get("title") or f"HTTP {response.status_code}"
    
    def normalize_payment(self, data: Dict[str, Any]) -> PaymentHandle:
        """Convert Mollie payment resource to PaymentHandle"""
        amount = data.get("amount") or {}
        links = data.get("_links") or {}
        checkout = links.get("checkout") or {}
        
        return PaymentHandle(
            id=data.get("id", ""),
            status=data.get("status", ""),
            amount=Decimal(amount["value"]) if amount.get("value") else None,
            currency=amount.get("currency"),
            description=data.get("description"),
            checkout_url=checkout.get("href"),
            metadata=data.get("metadata") or {},
            raw_payload=data,
        )
    
    # ========== Payments ==========
    
    async def create_payment(
        self,
        amount: Decimal,
        description: str,
        order_id: str,
        redirect_url: str,
        method: Optional[str] = None,
    ) -> PaymentHandle:
        """
        Create payment
        API: POST /v2/payments
        """
        body = {
            "amount": {
                "currency": self.currency,
                "value": self.format_amount(amount),
            },
            "description": description,
            "redirectUrl": redirect_url,
            "webhookUrl": self.webhook_url,
            "metadata": {"orderId": str(order_id)},
        }
        if method:
            body["method"] = method
        
        response = await self._request("POST", "/payments", json=body)
        if response.status_code not in (200, 201):
            detail = self._error_detail(response)
            logger.error(f"Mollie create payment failed for order {order_id}: {detail}")
            raise GatewayError(f"Mollie API Error: {detail}", provider_status=response.status_code)
        
        payment = self.normalize_payment(response.json())
        logger.info(f"Created Mollie payment {payment.id} for order {order_id}")
        return payment
    
    async def get_payment(self, payment_id: str) -> PaymentHandle:
        """
        Get payment
        API: GET /v2/payments/{id}
        """
        response = await self._request("GET", f"/payments/{payment_id}")
        
        if response.status_code == 404:
            raise PaymentNotFound(f"Mollie payment {payment_id} not found")
        if response.status_code != 200:
            detail = self._error_detail(response)
            raise GatewayError(f"Mollie API Error: {detail}", provider_status=response.status_code)
        
        return self.normalize_payment(response.json())
