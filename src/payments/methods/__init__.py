"""Payment method registry factory.

Provides get_payment_methods() / set_payment_methods() to swap implementations.
"""

from payments.methods.fake_adapter import FakePaymentMethods
from payments.methods.port import PaymentMethod, PaymentMethodRegistry

__all__ = ["PaymentMethod", "PaymentMethodRegistry", "get_payment_methods", "set_payment_methods", "reset_payment_methods"]

_current_registry: PaymentMethodRegistry | None = None


def get_payment_methods() -> PaymentMethodRegistry:
    """Return the current payment method registry. Defaults to FakePaymentMethods."""
    global _current_registry
    if _current_registry is None:
        _current_registry = FakePaymentMethods()
    return _current_registry


def set_payment_methods(registry: PaymentMethodRegistry) -> None:
    """Override the active registry (useful for tests)."""
    global _current_registry
    _current_registry = registry


def reset_payment_methods() -> None:
    """Reset to default registry."""
    global _current_registry
    _current_registry = None
