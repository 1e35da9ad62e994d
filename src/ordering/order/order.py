"""Order aggregate — the committed result of a checkout.

An order is created once, at checkout, with its items and totals frozen.
Afterwards only two things change: statuses are appended to
``status_history`` and ``payment.status`` moves from Unpaid to Paid.

State Machine:
    PENDING → PROCESSING → SHIPPING → DELIVERED
    CANCELLED (from PENDING, PROCESSING, SHIPPING)

DELIVERED and CANCELLED are terminal, so an order is cancelled (and its
stock released) at most once.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)
from shared.errors import InvalidStatusTransition

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPING = "Shipping"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class Actor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPING, OrderStatus.CANCELLED},
    OrderStatus.SHIPPING: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# The happy path, in order. Used by the status filter on order listings.
LINEAR_PATH = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPING,
    OrderStatus.DELIVERED,
)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class PaymentDetails:
    """How the order is paid for, and whether it has been."""

    method = String(required=True, max_length=50)
    status = String(
        required=True,
        choices=PaymentStatus,
        default=PaymentStatus.UNPAID.value,
    )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A purchased variation, with the price it was bought at.

    ``price_at_purchase`` is captured at checkout and never recomputed, even
    if the catalogue price changes later.
    """

    variation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String(max_length=50)
    title = String(required=True, max_length=255)
    price_at_purchase = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def sub_total(self):
        return self.price_at_purchase * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_code = String(required=True, max_length=32, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    status_history = Text(required=True)  # JSON: list of status values, last is current
    payment = ValueObject(PaymentDetails)
    receiver_name = String(max_length=255)
    phone_number = String(max_length=50)
    shipping_address = String(max_length=500)
    total_price = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    shipping_fee_percentage = Float(default=0.0)
    total_amount = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        order_code,
        items_data,
        payment_method,
        receiver_name,
        phone_number,
        shipping_address,
        total_price,
        shipping_fee,
        shipping_fee_percentage,
        total_amount,
        placed_at=None,
    ):
        """Create a Pending, Unpaid order.

        Args:
            items_data: List of dicts with variation_id, product_id, sku,
                        title, price_at_purchase, quantity.
            placed_at: Creation time; defaults to now.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = placed_at or datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            order_code=order_code,
            status=OrderStatus.PENDING.value,
            status_history=json.dumps([OrderStatus.PENDING.value]),
            payment=PaymentDetails(method=payment_method, status=PaymentStatus.UNPAID.value),
            receiver_name=receiver_name,
            phone_number=phone_number,
            shipping_address=shipping_address,
            total_price=total_price,
            shipping_fee=shipping_fee,
            shipping_fee_percentage=shipping_fee_percentage,
            total_amount=total_amount,
            created_at=now,
            updated_at=now,
        )
        order.add_items([OrderItem(**item) for item in items_data])

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_code=order_code,
                customer_id=str(customer_id),
                items=json.dumps(
                    [
                        {
                            "variation_id": str(item["variation_id"]),
                            "quantity": item["quantity"],
                            "price_at_purchase": item["price_at_purchase"],
                        }
                        for item in items_data
                    ]
                ),
                payment_method=payment_method,
                total_price=total_price,
                shipping_fee=shipping_fee,
                total_amount=total_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------
    @property
    def history(self) -> list[str]:
        return json.loads(self.status_history) if self.status_history else []

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_paid(self) -> bool:
        return self.payment is not None and self.payment.status == PaymentStatus.PAID.value

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def can_transition_to(self, target_status) -> bool:
        return OrderStatus(target_status) in _VALID_TRANSITIONS[self.current_status]

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def transition_to(self, target_status, actor=Actor.CUSTOMER):
        """Append ``target_status`` to the history.

        Delivering an order marks it Paid. Releasing stock for a cancelled
        order is the caller's job; the terminal state guarantees it happens
        once.
        """
        target = OrderStatus(target_status)
        actor = Actor(actor)
        current = self.current_status
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidStatusTransition(current.value, target.value)

        now = datetime.now(UTC)
        self.status_history = json.dumps([*self.history, target.value])
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_code=self.order_code,
                previous_status=current.value,
                new_status=target.value,
                actor=actor.value,
                changed_at=now,
            )
        )

        if target == OrderStatus.CANCELLED:
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    order_code=self.order_code,
                    items=json.dumps(
                        [{"variation_id": str(item.variation_id), "quantity": item.quantity} for item in self.items]
                    ),
                    cancelled_by=actor.value,
                    cancelled_at=now,
                )
            )
        elif target == OrderStatus.DELIVERED:
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    order_code=self.order_code,
                    delivered_at=now,
                )
            )
            self.mark_paid()

    def mark_paid(self):
        """Set ``payment.status`` to Paid. Paying twice is a no-op."""
        if self.current_status == OrderStatus.CANCELLED:
            raise ValidationError({"payment_status": ["A cancelled order cannot be paid"]})
        if self.is_paid:
            return

        now = datetime.now(UTC)
        self.payment = PaymentDetails(method=self.payment.method, status=PaymentStatus.PAID.value)
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                order_code=self.order_code,
                payment_method=self.payment.method,
                amount=self.total_amount,
                paid_at=now,
            )
        )
