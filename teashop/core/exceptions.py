"""
Domain errors for the order / payment / loyalty flow

Each error carries the HTTP status it maps to and whether the payment
provider should redeliver the notification that triggered it.
"""


class TeashopError(Exception):
    """Base error"""
    status_code: int = 500
    retryable: bool = False
    
    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.message)


class MissingInput(TeashopError):
    """Required input missing"""
    status_code = 400


class OrderNotFound(TeashopError):
    """Order not found"""
    status_code = 404


class PaymentNotFound(TeashopError):
    """Payment not found at provider"""
    status_code = 404


class OrderAlreadyPaid(TeashopError):
    """Order is already paid"""
    status_code = 400


class InsufficientPoints(TeashopError):
    """Not enough loyalty points"""
    status_code = 400


class GatewayError(TeashopError):
    """Payment provider request failed"""
    status_code = 500
    retryable = True
    
    def __init__(self, message: str = None, provider_status: int = None):
        super().__init__(message)
        self.provider_status = provider_status


class GatewayConfigError(TeashopError):
    """Payment provider is not configured"""
    status_code = 500


class PersistenceError(TeashopError):
    """Database write failed"""
    status_code = 500
    retryable = True


class DeliveryError(TeashopError):
    """Notification could not be delivered"""
    status_code = 502


class UserNotFound(TeashopError):
    """User not found"""
    status_code = 404


class RewardNotFound(TeashopError):
    """Reward niet gevonden"""
    status_code = 404


class RewardUnavailable(TeashopError):
    """Deze beloning is niet meer beschikbaar"""
    status_code = 400
