"""
Notification Service - Transactional e-mail via Brevo
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any
import httpx
import logging

from jinja2 import Environment, PackageLoader, select_autoescape

from teashop.core.exceptions import DeliveryError
from teashop.models import Order

logger = logging.getLogger(__name__)

SHOP_ADDRESS = "Sint-Niklaasstraat 36, 9000 Gent"

DUTCH_WEEKDAYS = ["maandag", "dinsdag", "woensdag", "donderdag", "vrijdag", "zaterdag", "zondag"]
DUTCH_MONTHS = [
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
]


@dataclass
class ConfirmationItem:
    name: str
    quantity: int
    price: Decimal
    customizations: Optional[Dict[str, Any]] = None


@dataclass
class OrderConfirmation:
    """Payload for the order confirmation mail"""
    order_number: str
    customer_name: str
    customer_email: str
    pickup_time: datetime
    total: Decimal
    points_earned: int
    items: List[ConfirmationItem] = field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order) -> "OrderConfirmation":
        return cls(
            order_number=order.order_number,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            pickup_time=order.pickup_time,
            total=order.total,
            points_earned=order.points_earned,
            items=[
                ConfirmationItem(
                    name=item.product_name,
                    quantity=item.quantity,
                    price=item.unit_price,
                    customizations=item.customizations,
                )
                for item in order.items
            ],
        )


def format_pickup_time(value: datetime) -> str:
    """e.g. 'zaterdag 17 oktober om 14:30'"""
    return (
        f"{DUTCH_WEEKDAYS[value.weekday()]} {value.day} {DUTCH_MONTHS[value.month - 1]}"
        f" om {value:%H:%M}"
    )


def format_customizations(customizations: Optional[Dict[str, Any]]) -> str:
    if not customizations:
        return ""

    parts = []
    if customizations.get("sugarLevel") is not None:
        parts.append(f"Suiker: {customizations['sugarLevel']}%")
    if customizations.get("iceLevel"):
        parts.append(f"IJs: {customizations['iceLevel']}")
    toppings = customizations.get("toppings") or []
    if isinstance(toppings, list) and toppings:
        names = [t.get("name", "") if isinstance(t, dict) else str(t) for t in toppings]
        parts.append(f"Toppings: {', '.join(names)}")

    return f" ({', '.join(parts)})" if parts else ""


_env = Environment(
    loader=PackageLoader("teashop", "templates"),
    autoescape=select_autoescape(["html"]),
)
_env.filters["customizations"] = format_customizations


class NotificationService:
    """
    Sends transactional mails through the Brevo SMTP API
    Single attempt per call, no retries
    """

    def __init__(
        self,
        api_key: Optional[str],
        from_email: str,
        from_name: str,
        api_url: str = "https://api.brevo.com/v3",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def render_order_confirmation(self, data: OrderConfirmation) -> str:
        template = _env.get_template("order_confirmation.html")
        return template.render(
            shop_name=self.from_name,
            shop_address=SHOP_ADDRESS,
            order_number=data.order_number,
            customer_name=data.customer_name,
            pickup_time=format_pickup_time(data.pickup_time),
            items=[
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "price": float(item.price),
                    "customizations": item.customizations,
                }
                for item in data.items
            ],
            total=float(data.total),
            points_earned=data.points_earned or 0,
        )

    async def _send(self, to_email: str, to_name: str, subject: str, html: str) -> Dict[str, Any]:
        body = {
            "sender": {"name": self.from_name, "email": self.from_email},
            "to": [{"email": to_email, "name": to_name or to_email}],
            "subject": subject,
            "htmlContent": html,
        }
        headers = {"api-key": self.api_key, "Accept": "application/json"}
        url = f"{self.api_url}/smtp/email"

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise DeliveryError(f"Brevo request failed: {e}") from e

        if response.status_code >= 300:
            logger.error(f"Brevo API error {response.status_code}: {response.text}")
            raise DeliveryError(f"Brevo send failed: {response.status_code}")

        return response.json() if response.content else {}

    async def send_order_confirmation(self, data: OrderConfirmation) -> bool:
        """Send the order confirmation; False when skipped, DeliveryError on failure"""
        if not self.enabled:
            logger.warning("BREVO_API_KEY not set, skipping email")
            return False
        if not data.customer_email:
            logger.warning(f"Order {data.order_number} has no e-mail address, skipping confirmation")
            return False

        subject = f"Bevestiging bestelling {data.order_number} - {self.from_name}"
        html = self.render_order_confirmation(data)
        result = await self._send(data.customer_email, data.customer_name, subject, html)

        logger.info(f"Order confirmation {data.order_number} sent to {data.customer_email} ({result.get('messageId', '-')})")
        return True
