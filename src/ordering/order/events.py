"""Domain events for the Order aggregate.

All events are versioned, immutable facts representing state changes.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was committed at checkout and its stock reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {variation_id, quantity, price_at_purchase}
    payment_method = String(required=True)
    total_price = Float(required=True)
    shipping_fee = Float(required=True)
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """A status was appended to the order's history."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    actor = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled; its items were returned to stock."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    items = Text(required=True)  # JSON: list of {variation_id, quantity}
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaid:
    """Payment for the order was recorded, on delivery or by the payment gateway."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    payment_method = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)
