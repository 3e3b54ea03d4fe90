"""
Shared FastAPI dependencies - explicitly constructed outbound clients
"""
from teashop.core.config import settings
from teashop.integrations import MolliePaymentGateway, PaymentGateway
from teashop.services.notification_service import NotificationService


def get_payment_gateway() -> PaymentGateway:
    return MolliePaymentGateway(
        api_key=settings.MOLLIE_API_KEY,
        webhook_url=settings.MOLLIE_WEBHOOK_URL,
        base_url=settings.MOLLIE_API_URL,
        currency=settings.PAYMENT_CURRENCY,
        timeout=settings.HTTP_TIMEOUT,
    )


def get_notification_service() -> NotificationService:
    return NotificationService(
        api_key=settings.BREVO_API_KEY,
        from_email=settings.MAIL_FROM_EMAIL,
        from_name=settings.MAIL_FROM_NAME,
        api_url=settings.BREVO_API_URL,
        timeout=settings.HTTP_TIMEOUT,
    )
