"""Configurable fake payment method registry for development and testing.

Every method starts enabled; tests flip individual methods off with
``configure()`` to exercise the checkout guard.
"""

from payments.methods.port import PaymentMethod, PaymentMethodRegistry


class FakePaymentMethods(PaymentMethodRegistry):
    """Configurable fake payment method registry."""

    def __init__(self) -> None:
        self.enabled: dict[str, bool] = {method.value: True for method in PaymentMethod}
        self.calls: list[str] = []

    def configure(self, method: str, enabled: bool) -> None:
        """Enable or disable a payment method at runtime."""
        self.enabled[method] = enabled

    def is_enabled(self, method: str) -> bool:
        self.calls.append(method)
        return self.enabled.get(method, False)
