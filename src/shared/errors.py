"""Error taxonomy shared by the catalogue, inventory, and ordering contexts.

Every error carries a Protean-style ``messages`` dict (``{field: [message]}``)
and subclasses the Protean exception that matches its category, so it
travels through ``current_domain.process()`` untouched:

- Conflicts and transition errors are ``ValidationError`` subclasses.
- Missing records are ``ObjectNotFoundError`` subclasses.
- ``StoreTimeout`` is infrastructure and is never retried inside the core.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


def _messages(field, message):
    return {field: [message]}


# ---------------------------------------------------------------------------
# Conflicts carry the conflicting quantities so a client can retry
# ---------------------------------------------------------------------------
class InsufficientStock(ValidationError):
    """A reservation asked for more units than are available."""

    def __init__(self, variation_id, requested, available):
        self.variation_id = str(variation_id)
        self.requested = requested
        self.available = available
        self.messages = _messages(
            "quantity",
            f"Insufficient stock for variation {variation_id}: {available} available, {requested} requested",
        )
        super().__init__(self.messages)


class QuantityExceedsStock(ValidationError):
    """A cart line would hold more units than the variation has in stock."""

    def __init__(self, variation_id, requested, available):
        self.variation_id = str(variation_id)
        self.requested = requested
        self.available = available
        self.messages = _messages(
            "quantity",
            f"Quantity must be less than or equal to {available} for variation {variation_id}",
        )
        super().__init__(self.messages)


class StockChanged(ValidationError):
    """Stock dropped below cart quantities between browsing and checkout.

    ``lines`` lists ``{"variation_id", "requested", "available"}`` for every
    conflicting cart line.
    """

    def __init__(self, lines):
        self.lines = list(lines)
        self.messages = {
            "cart": [
                f"Variation {line['variation_id']}: {line['available']} available, {line['requested']} in cart"
                for line in self.lines
            ]
        }
        super().__init__(self.messages)


class CartConflict(ValidationError):
    """The cart was modified by another session since it was loaded.

    Nothing from the losing write is kept. Reload the cart and retry.
    """

    def __init__(self, customer_id):
        self.customer_id = str(customer_id)
        self.messages = _messages(
            "cart",
            f"Cart of customer {customer_id} changed concurrently, reload it and try again",
        )
        super().__init__(self.messages)


class OrderCodeUnavailable(ValidationError):
    def __init__(self, attempts):
        self.attempts = attempts
        self.messages = _messages("order_code", f"Could not generate a unique order code in {attempts} attempts")
        super().__init__(self.messages)


# ---------------------------------------------------------------------------
# Transition errors are surfaced to the caller as-is
# ---------------------------------------------------------------------------
class InvalidStatusTransition(ValidationError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        self.messages = _messages("status", f"Cannot transition from {current} to {target}")
        super().__init__(self.messages)


class PaymentMethodDisabled(ValidationError):
    def __init__(self, method):
        self.method = method
        self.messages = _messages(
            "payment_method",
            f"Payment method {method} is currently unavailable, please reload and choose again",
        )
        super().__init__(self.messages)


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class _NotFound(ObjectNotFoundError):
    field = "id"
    label = "Object"

    def __init__(self, identifier):
        self.identifier = str(identifier)
        self.messages = _messages(self.field, f"{self.label} {identifier} not found")
        super().__init__(self.messages)


class OrderNotFound(_NotFound):
    field = "order_id"
    label = "Order"


class VariationNotFound(_NotFound):
    field = "variation_id"
    label = "Variation"


class ProductNotFound(_NotFound):
    field = "product_id"
    label = "Product"


class CustomerNotFound(_NotFound):
    field = "customer_id"
    label = "Customer"


class ItemNotFound(_NotFound):
    field = "variation_id"
    label = "Cart item for variation"


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------
class StoreTimeout(TimeoutError):
    """A data-store operation did not complete within its timeout."""

    def __init__(self, operation, timeout):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout}s")
