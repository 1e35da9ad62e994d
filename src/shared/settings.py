"""Environment-driven settings shared by the catalogue, inventory, and ordering contexts.

Read lazily on every call so tests can override values with ``monkeypatch.setenv``.
"""

import os

ORDER_CODE_PREFIX = "ORDER-"
ORDER_CODE_LENGTH = 10


def stock_lock_timeout() -> float:
    """Seconds a stock update may wait for the store lock before timing out."""
    return float(os.getenv("STOCK_LOCK_TIMEOUT", "5"))


def order_code_max_attempts() -> int:
    return int(os.getenv("ORDER_CODE_MAX_ATTEMPTS", "5"))


def gateway_payment_methods() -> set[str]:
    """Payment methods that need their upstream gateway to be enabled at checkout."""
    raw = os.getenv("GATEWAY_PAYMENT_METHODS", "VNPay")
    return {method.strip() for method in raw.split(",") if method.strip()}


def shipping_fee_tiers_spec() -> str | None:
    """Raw ``SHIPPING_FEE_TIERS`` value, e.g. ``"0:10,1000000:5"`` (min_total:percentage)."""
    return os.getenv("SHIPPING_FEE_TIERS")
