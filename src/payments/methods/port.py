"""Payment method registry port (abstract interface).

Checkout asks this registry whether a gateway-backed payment method is
currently enabled before accepting an order that would pay through it.
"""

from abc import ABC, abstractmethod
from enum import Enum


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "Cash_On_Delivery"
    VNPAY = "VNPay"


class PaymentMethodRegistry(ABC):
    """Abstract payment method availability interface."""

    @abstractmethod
    def is_enabled(self, method: str) -> bool:
        """Return whether the named payment method can accept new orders."""
        ...
